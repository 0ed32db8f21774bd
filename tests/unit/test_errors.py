from __future__ import annotations

import pytest

from greenhouse.core.errors import IdentityError, IdentityErrorKind, StorageError


@pytest.mark.parametrize("kind", list(IdentityErrorKind))
def test_each_kind_has_stable_code_and_message(kind: IdentityErrorKind) -> None:
    error = IdentityError(kind)

    assert error.kind is kind
    assert error.code == kind.value
    assert str(error)


def test_custom_message_overrides_default() -> None:
    error = IdentityError(IdentityErrorKind.INVALID_API_KEY, "unknown key")

    assert str(error) == "unknown key"
    assert "INVALID_API_KEY" in repr(error)


def test_storage_error_is_not_identity_error() -> None:
    assert not issubclass(StorageError, IdentityError)
