import pytest

from tapo_locator.utils.error_handler import (
    ErrorContext, ErrorHandler, ErrorSeverity, ErrorType, with_retry
)


def test_record_counts_by_error_type(quiet_logger):
    handler = ErrorHandler(quiet_logger)
    context = ErrorContext(ErrorType.PROBE_TIMEOUT, ErrorSeverity.LOW, "probe", "BroadcastScanner")

    handler.record(TimeoutError("timed out"), context)
    handler.record(TimeoutError("timed out"), context)

    assert handler.count(ErrorType.PROBE_TIMEOUT) == 2
    assert handler.count(ErrorType.TRANSPORT_ERROR) == 0


def test_with_retry_retries_listed_errors():
    delays = []
    attempts = []

    @with_retry(max_retries=2, error_types=(ConnectionError,), sleep=delays.append)
    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("reset")
        return "ok"

    assert flaky() == "ok"
    assert len(attempts) == 3
    assert len(delays) == 2
    assert 1 < delays[0] < 2 < delays[1] < 3


def test_with_retry_gives_up_after_max_retries():
    @with_retry(max_retries=1, error_types=(ConnectionError,), sleep=lambda s: None)
    def down():
        raise ConnectionError("refused")

    with pytest.raises(ConnectionError):
        down()


def test_with_retry_does_not_retry_other_errors():
    attempts = []

    @with_retry(max_retries=3, error_types=(ConnectionError,), sleep=lambda s: None)
    def broken():
        attempts.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        broken()
    assert len(attempts) == 1
