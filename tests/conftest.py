"""Shared fixtures for the statement import test suite."""

from datetime import date
from decimal import Decimal

import pytest

from bank_statement_recon.config import ImportConfig
from bank_statement_recon.models.counterparty import (
    Client,
    CounterpartyAlias,
    Employee,
)
from bank_statement_recon.models.transaction import (
    LedgerTransaction,
    RawTransaction,
    ReconciliationStatus,
)

EXCHANGE_TEXT = """1CClientBankExchange
ВерсияФормата=1.03
Кодировка=Windows
Отправитель=Бухгалтерия
ДатаНачала=01.03.2024
ДатаКонца=31.03.2024
РасчСчет=KZ12345678901234567890
СекцияДокумент=Платежное поручение
НомерДокумента=101
ДатаДокумента=01.03.2024
Сумма=100000,00
ПлательщикНаименование=ТОО Ромашка
Плательщик_ИНН=123456789012
НазначениеПлатежа=Предоплата по договору 5
КодНазначенияПлатежа=710
КонецДокумента
СекцияДокумент=Платежное поручение
НомерДокумента=102
ДатаДокумента=02.03.2024
Сумма=1 500,50
Валюта=USD
ПлательщикНаименование=ТОО Лютик
Плательщик_ИНН=555566667777
НазначениеПлатежа=Оплата по контракту, курс сделки 450.25
КодНазначенияПлатежа=710
КонецДокумента
КонецФайла
"""

CSV_TEXT = """Дата;Наименование;Зачислено;Назначение
01.03.2024;ТОО Ромашка;100000;Оплата услуг
"""


@pytest.fixture
def config():
    """Default configuration."""
    return ImportConfig()


@pytest.fixture
def exchange_text():
    """1C exchange file with a KZT and a USD payment."""
    return EXCHANGE_TEXT


@pytest.fixture
def csv_text():
    return CSV_TEXT


@pytest.fixture
def clients():
    """Clients of the test organization; c2 has no tax ID on file."""
    return [
        Client(id="c1", company="ТОО Ромашка", bin="123456789012"),
        Client(id="c2", company="ТОО Лютик"),
        Client(
            id="c3",
            name="Астана Логистик",
            legal_name='ТОО "Астана Логистик"',
            inn="987654321098",
        ),
    ]


@pytest.fixture
def employees():
    return [Employee(id="e1", name="Иванов Иван Иванович", iin="880101300123")]


@pytest.fixture
def aliases():
    return [
        CounterpartyAlias(
            organization_id="org1",
            bank_name='ТОО "Цветы Степи"',
            client_id="c2",
        ),
        CounterpartyAlias(
            organization_id="org1",
            bank_name="Лютик ЦС",
            bank_tax_id="111122223333",
            client_id="c2",
        ),
    ]


@pytest.fixture
def make_txn():
    """Factory for RawTransaction with sensible defaults."""

    def _make(**kwargs) -> RawTransaction:
        defaults = {
            "date": date(2024, 3, 2),
            "amount": Decimal("100000"),
            "amount_original": kwargs.get("amount", Decimal("100000")),
            "currency": "KZT",
            "counterparty_name_raw": "ТОО Ромашка",
        }
        defaults.update(kwargs)
        return RawTransaction(**defaults)

    return _make


@pytest.fixture
def make_ledger_entry():
    """Factory for LedgerTransaction with sensible defaults."""

    def _make(**kwargs) -> LedgerTransaction:
        defaults = {
            "id": "L1",
            "date": date(2024, 3, 1),
            "amount": Decimal("100000"),
            "client_id": "c1",
            "reconciliation_status": ReconciliationStatus.NONE,
        }
        defaults.update(kwargs)
        return LedgerTransaction(**defaults)

    return _make
