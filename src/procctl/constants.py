"""
Default timing values shared by the configuration layer and the controller.
"""


class TimeoutConstants:
    """
    Centralized timeout configuration.

    These are the built-in defaults; `config.toml` can override the first
    three ([process]) and the lock retry pair ([lock]).
    """
    # Process termination
    STOP_TIMEOUT = 5.0
    POLL_INTERVAL = 1.0

    # wait_for_exit polling
    WAIT_POLL_INTERVAL = 0.1

    # Lock acquisition retries
    LOCK_RETRIES = 10
    LOCK_RETRY_DELAY = 0.1
