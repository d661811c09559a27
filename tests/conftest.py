import os
from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from lxml import etree

# Keep ambient settings deterministic regardless of the developer's shell.
TEST_ENV_DEFAULTS = {
    "SOAP_DEBUG": "false",
    "LOG_TO_SPLUNK": "false",
}

for env_key, env_value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(env_key, env_value)

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"
CALCULATOR_WSDL = FIXTURES_DIR / "calculator.wsdl"
CALCULATOR_ADDRESS = "http://calculator.example.com/calculator.asmx"


def make_fake_client(operations: tuple[str, ...] = ("Add", "Subtract")) -> MagicMock:
    """Zeep client stand-in exposing one service with one port."""
    binding = MagicMock()
    binding.name = etree.QName("http://tempuri.org/", "CalculatorSoap")
    binding.all.return_value = {name: MagicMock() for name in operations}
    port = SimpleNamespace(binding=binding, binding_options={"address": CALCULATOR_ADDRESS})

    client = MagicMock()
    client.wsdl.services = {"Calculator": SimpleNamespace(ports={"CalculatorSoap": port})}
    return client


@pytest.fixture
def fake_client() -> Iterator[MagicMock]:
    """Patch zeep.Client so adapters connect to a fake client."""
    client = make_fake_client()
    with patch("zeep.Client", return_value=client) as client_class:
        client.client_class = client_class
        yield client


@pytest.fixture
def calculator_wsdl() -> str:
    return str(CALCULATOR_WSDL)
