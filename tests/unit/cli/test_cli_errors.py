"""Every CLI error message names the cause and the fix."""

from __future__ import annotations

import pytest

from artframe.cli import errors


@pytest.mark.parametrize(
    ("message", "cause", "action"),
    [
        (errors.err_no_db("/tmp/a.db"), "/tmp/a.db", "artframe init"),
        (errors.err_source_not_found(4), "id 4", "artframe sources list"),
        (errors.err_no_artwork(), "No current artwork", "artframe artwork set"),
        (errors.err_write_failed("FOREIGN KEY"), "FOREIGN KEY", "existing source"),
        (errors.err_no_payload("No artwork image is set"), "No artwork image", "artframe artwork payload"),
        (errors.err_invalid_payload("x.jpg"), "x.jpg", "downloaded artwork image"),
        (errors.err_config("bad level"), "bad level", "artframe.yaml"),
    ],
)
def test_error_has_cause_and_action(message: str, cause: str, action: str) -> None:
    assert cause in message
    assert action in message
