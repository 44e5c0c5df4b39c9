# tests/test_error_mapping.py
import pytest

from src.shared.errors.domain.authentication import AccountNotFoundError, InvalidOtpError
from src.shared.errors.domain.registration import InvalidTransitionError, RecordHiddenError
from src.shared.errors.mapping import error_for_kind, raise_for_result
from src.shared.utilities.result import ErrorKind, Result


class TestErrorForKind:
    def test_role_mismatch_is_indistinguishable_from_unknown_account(self):
        unknown = error_for_kind(ErrorKind.ACCOUNT_NOT_FOUND)
        mismatch = error_for_kind(ErrorKind.ROLE_MISMATCH)

        assert isinstance(mismatch, AccountNotFoundError)
        assert (unknown.error_code, unknown.message, unknown.status_code) == \
               (mismatch.error_code, mismatch.message, mismatch.status_code)

    def test_transition_uses_message_key(self):
        error = error_for_kind(ErrorKind.INVALID_TRANSITION, subject="reg-1",
                               provider_message="registration.needs_verification",
                               details={"action": "approve", "status": "Pending"})

        assert isinstance(error, InvalidTransitionError)
        assert error.status_code == 409
        assert "Document Verifier" in error.message

    def test_hidden_defaults_to_generic_message(self):
        error = error_for_kind(ErrorKind.RECORD_HIDDEN, subject="reg-1")

        assert isinstance(error, RecordHiddenError)
        assert error.message == "This record is hidden and cannot be modified."

    def test_provider_verify_failure_is_invalid_code(self):
        assert isinstance(error_for_kind(ErrorKind.PROVIDER_VERIFY_FAILED), InvalidOtpError)


class TestRaiseForResult:
    def test_success_is_noop(self):
        raise_for_result(Result.success("value"))

    def test_failure_raises_mapped_error(self):
        with pytest.raises(AccountNotFoundError):
            raise_for_result(Result.failure(ErrorKind.ROLE_MISMATCH))
