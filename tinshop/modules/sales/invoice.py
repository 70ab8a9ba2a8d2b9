# tinshop/modules/sales/invoice.py
from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Template

from ...constants import APP_NAME
from ...database.repositories.sales_repo import Sale
from ...utils.helpers import fmt_money

_log = logging.getLogger(__name__)

INVOICE_TEMPLATE_PATH = "resources/templates/sale_invoice.html"


def _load_template(template_dir: str | Path | None = None) -> str:
    if template_dir:
        path = Path(template_dir) / "sale_invoice.html"
    else:
        # tinshop/modules/sales/invoice.py -> tinshop/
        package_root = Path(__file__).resolve().parent.parent.parent
        path = package_root / INVOICE_TEMPLATE_PATH
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Invoice template not found at: {path}. Error: {e}"
        _log.error(msg)
        raise FileNotFoundError(msg) from e


def render_invoice_html(
    sale: Sale,
    *,
    shop_name: str = APP_NAME,
    template_dir: str | Path | None = None,
) -> str:
    """Printable HTML memo for one sale."""
    template = Template(_load_template(template_dir), autoescape=True)
    return template.render(sale=sale, shop_name=shop_name, money=fmt_money)
