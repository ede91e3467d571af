from typing import Callable

from security.bruteforce import AttemptRecorder, LockoutGate, get_gate, get_recorder


class LoginFailed(Exception):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AccountLocked(LoginFailed):
    # never says whether the lock is permanent or temporary
    def __init__(self):
        super().__init__("This account has been locked. Please contact an administrator.")


class LoginBackoff(LoginFailed):
    # tells the caller how long to wait, not how many attempts are left
    def __init__(self, delay_seconds: int):
        self.delay_seconds = delay_seconds
        super().__init__(
            f"Too many failed login attempts. Please wait {delay_seconds} seconds before trying again."
        )


def attempt_login(
    account_id: int,
    check_credentials: Callable[[], bool],
    origin_address: str | None = None,
    gate: LockoutGate | None = None,
    recorder: AttemptRecorder | None = None,
) -> None:
    """
    Gate, verify, record.

    A locked or throttled account never reaches check_credentials and no
    attempt is recorded for it. Raises LoginFailed (or a subclass) on any
    refusal; returns None when the credentials were accepted.
    """
    gate = gate or get_gate()
    recorder = recorder or get_recorder()

    if gate.is_locked(account_id):
        raise AccountLocked()

    delay_seconds = gate.get_backoff_delay_seconds(account_id)
    if delay_seconds:
        raise LoginBackoff(delay_seconds)

    ok = bool(check_credentials())
    recorder.record(account_id, ok, origin_address)

    if not ok:
        raise LoginFailed()
