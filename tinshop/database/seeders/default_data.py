import json
import logging

from ...constants import FIRST_INVOICE_ID, KEY_SETTINGS, TABLE_DOCUMENTS

_log = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "brands": [],
    "colors": [],
    "thicknesses": [],
    "productTypes": [],
    "customFields": [],
    "nextInvoiceId": FIRST_INVOICE_ID,
}


def seed(conn):
    # create the store settings document on first run; never overwrite
    row = conn.execute(
        f"SELECT 1 FROM {TABLE_DOCUMENTS} WHERE key=?", (KEY_SETTINGS,)
    ).fetchone()
    if row is None:
        conn.execute(
            f"INSERT INTO {TABLE_DOCUMENTS}(key, value) VALUES (?, ?)",
            (KEY_SETTINGS, json.dumps(DEFAULT_SETTINGS)),
        )
        conn.commit()
        _log.info("Seeded default store settings (first invoice %s)", FIRST_INVOICE_ID)
