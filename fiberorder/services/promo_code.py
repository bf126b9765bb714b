"""Promo code validation: code, validity window, street restriction."""
import re
from datetime import date

from sqlmodel import Session, select

from fiberorder.models import PromoCode
from fiberorder.schemas.order import AppliedPromoCode


def normalize_street(street: str | None) -> str:
    """Street name without house number: 'Fontanestraße 12', 'fontanestr. 3a' and 'fontanestrasse' compare equal."""
    s = (street or "").strip().lower().replace("ß", "ss")
    s = re.split(r"\d", s, maxsplit=1)[0]
    s = "".join(ch for ch in s if ch.isalpha())
    if s.endswith("str"):
        s += "asse"
    return s


def _parse_streets(s: str | None) -> list[str]:
    if not s or not (s := s.strip()):
        return []
    return [n for n in (normalize_street(part) for part in s.split(",")) if n]


def street_matches(valid_streets: str | None, street: str | None) -> bool:
    allowed = _parse_streets(valid_streets)
    if not allowed:
        return True
    given = normalize_street(street)
    if not given:
        return False
    return given in allowed


def validate_promo_code(
    db: Session,
    code: str,
    street: str | None = None,
    today: date | None = None,
) -> tuple[AppliedPromoCode | None, str | None]:
    """
    Looks up and checks a promo code.
    Returns (applied_code, error_message); exactly one of them is None.
    """
    if not code or not (code := code.strip()):
        return None, "Bitte einen Aktionscode eingeben."
    code_upper = code.upper()
    promo = db.exec(select(PromoCode).where(PromoCode.code == code_upper)).first()
    if not promo or not promo.is_active:
        return None, "Ungültiger Aktionscode."

    today = today or date.today()
    if promo.valid_from and today < promo.valid_from:
        return None, "Dieser Aktionscode ist noch nicht gültig."
    if promo.valid_until and today > promo.valid_until:
        return None, "Dieser Aktionscode ist abgelaufen."

    if not street_matches(promo.valid_streets, street):
        return None, "Dieser Aktionscode ist für Ihre Adresse nicht gültig."

    return (
        AppliedPromoCode(
            code=promo.code,
            description=promo.description or "",
            router_discount=promo.router_discount or 0,
            setup_fee_waived=bool(promo.setup_fee_waived),
        ),
        None,
    )
