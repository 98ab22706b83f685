import logging

import pytest
from fastapi import HTTPException

from daysheets.utils.errors import ConflictError, ForbiddenError, error_response


def test_error_response_logs(caplog):
    caplog.set_level(logging.ERROR, logger="daysheets.utils.errors")
    with pytest.raises(HTTPException) as info:
        raise error_response("Invalid", {"field": "bad"})
    assert info.value.status_code == 422
    assert info.value.detail == {"message": "Invalid", "field_errors": {"field": "bad"}}
    assert any(
        "Invalid" in r.getMessage() and "'field': 'bad'" in r.getMessage()
        for r in caplog.records
    )


def test_domain_errors_share_the_detail_shape():
    err = ConflictError("PNR already used", {"pnr": "duplicate"})
    assert err.status_code == 409
    assert err.to_detail() == {"message": "PNR already used", "field_errors": {"pnr": "duplicate"}}
    assert ForbiddenError("nope").to_detail()["field_errors"] == {}
