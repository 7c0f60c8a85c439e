"""Tests for CPF validation."""

import pytest

from fila_client.domain.cpf import (
    clean_cpf,
    looks_like_email,
    should_skip_cpf_validation,
    validate_cpf,
)


def test_clean_cpf_strips_punctuation() -> None:
    """Given a formatted CPF, when cleaning, then only digits remain."""
    assert clean_cpf("529.982.247-25") == "52998224725"


@pytest.mark.parametrize("cpf", ["529.982.247-25", "52998224725"])
def test_valid_cpf_passes(cpf: str) -> None:
    """Given a CPF with correct check digits, when validating, then it passes."""
    assert validate_cpf(cpf, "production") is True


@pytest.mark.parametrize(
    "cpf",
    ["529.982.247-26", "111.111.111-11", "123", "", "529.982.247-250"],
)
def test_invalid_cpf_fails(cpf: str) -> None:
    """Given a malformed CPF, when validating, then it fails."""
    assert validate_cpf(cpf, "production") is False


@pytest.mark.parametrize("env", ["development", "staging"])
def test_bypass_cpf_passes_outside_production(env: str) -> None:
    """Given a designated test CPF, when validating in development or staging, then it passes."""
    assert should_skip_cpf_validation("000.000.000-01", env) is True
    assert validate_cpf("000.000.000-01", env) is True
    assert validate_cpf("000.000.000-02", env) is True


def test_bypass_cpf_fails_in_production() -> None:
    """Given a designated test CPF, when validating in production, then check digits apply."""
    assert should_skip_cpf_validation("000.000.000-01", "production") is False
    assert validate_cpf("000.000.000-01", "production") is False


def test_looks_like_email() -> None:
    """Given identifiers, when classifying, then only those with '@' are e-mails."""
    assert looks_like_email("maria@example.com") is True
    assert looks_like_email("529.982.247-25") is False
