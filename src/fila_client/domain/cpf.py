"""CPF (Brazilian taxpayer number) validation."""

import re

# Designated test documents accepted without check-digit validation outside production.
BYPASS_CPFS = frozenset({"00000000001", "00000000002"})
BYPASS_ENVIRONMENTS = frozenset({"development", "staging"})


def clean_cpf(cpf: str) -> str:
    """Strip everything but digits."""
    return re.sub(r"\D", "", cpf)


def should_skip_cpf_validation(cpf: str, environment: str) -> bool:
    """True if ``cpf`` is a bypass document and ``environment`` allows bypasses."""
    return environment in BYPASS_ENVIRONMENTS and clean_cpf(cpf) in BYPASS_CPFS


def _check_digit(digits: str, weight_start: int) -> int:
    total = sum(int(d) * (weight_start - i) for i, d in enumerate(digits))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def validate_cpf(cpf: str, environment: str | None = None) -> bool:
    """Validate length, repeated digits and both check digits of a CPF."""
    if environment and should_skip_cpf_validation(cpf, environment):
        return True

    cleaned = clean_cpf(cpf)
    if len(cleaned) != 11:
        return False
    if cleaned == cleaned[0] * 11:
        return False

    if _check_digit(cleaned[:9], 10) != int(cleaned[9]):
        return False
    return _check_digit(cleaned[:10], 11) == int(cleaned[10])


def looks_like_email(identifier: str) -> bool:
    """Distinguish e-mail identifiers from document numbers."""
    return "@" in identifier
