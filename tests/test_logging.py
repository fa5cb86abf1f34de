import json
import logging

from ledger.core.logging import LedgerJsonFormatter


def test_json_formatter_adds_service_and_extra_fields():
    formatter = LedgerJsonFormatter("%(levelname)s %(name)s %(message)s", service="apexfin-ledger", env="test")
    record = logging.LogRecord(
        name="ledger.services.transactions",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Transaction created",
        args=(),
        exc_info=None,
    )
    record.transaction_id = 7

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Transaction created"
    assert payload["levelname"] == "INFO"
    assert payload["service"] == "apexfin-ledger"
    assert payload["env"] == "test"
    assert payload["transaction_id"] == 7
