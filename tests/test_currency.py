#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import io
import os.path

import pytest
import requests

from datetime import date
from decimal import Decimal

import currency

from currency import FixedRates, HistoricRates, HmrcRates, Normalizer
from errors import RateUnavailable


data_dir = os.path.join(os.path.dirname(__file__), 'data')


def historic_rates():
    return HistoricRates('USD', open(os.path.join(data_dir, 'USDGBP=X.csv'), 'rt'))


def test_home_currency_unchanged():
    normalizer = Normalizer(FixedRates({}), 'GBP')
    assert normalizer.convert(Decimal('123.45'), 'GBP', date(2022, 1, 1)) == Decimal('123.45')


def test_fixed_rates():
    normalizer = Normalizer(FixedRates({'USD': Decimal('0.8')}))
    assert normalizer.convert(Decimal('100'), 'USD', date(2022, 1, 1)) == Decimal('80.0')


def test_rate_unavailable():
    normalizer = Normalizer(FixedRates({'USD': Decimal('0.8')}))
    with pytest.raises(RateUnavailable) as excinfo:
        normalizer.convert(Decimal('100'), 'EUR', date(2022, 1, 1))
    assert excinfo.value.currency == 'EUR'
    assert excinfo.value.date == date(2022, 1, 1)


@pytest.mark.parametrize("code", ['usd', 'US', 'DOLLAR', ''])
def test_invalid_currency(code):
    normalizer = Normalizer(FixedRates({}))
    with pytest.raises(ValueError):
        normalizer.convert(Decimal('1'), code, date(2022, 1, 1))


@pytest.mark.parametrize("d,rate", [
    (date(2022, 2, 24), Decimal('0.746900')),
    (date(2022, 2, 25), Decimal('0.745800')),
    (date(2023, 3,  1), Decimal('0.827300')),
])
def test_historic_rates(d, rate):
    assert historic_rates().rate_for('USD', d) == rate


@pytest.mark.parametrize("d", [
    date(2022, 2, 26),  # null row
    date(2022, 2, 27),  # missing, no fallback to earlier dates
    date(1900, 1, 1),
])
def test_historic_rates_exact_date(d):
    rates = historic_rates()
    assert rates.rate_for('USD', d) is None
    with pytest.raises(RateUnavailable):
        Normalizer(rates).convert(Decimal('1'), 'USD', d)


def test_historic_rates_other_currency():
    assert historic_rates().rate_for('EUR', date(2022, 2, 25)) is None


def test_hmrc_rates(monkeypatch):
    calls = []

    def exchange_rates(year, month):
        calls.append((year, month))
        return {'USD': Decimal('1.25')} if (year, month) == (2024, 8) else {}

    monkeypatch.setattr(currency, 'hmrc_exchange_rates', exchange_rates)

    rates = HmrcRates()
    assert rates.rate_for('USD', date(2024, 8, 1)) == Decimal('0.8')
    assert rates.rate_for('USD', date(2024, 8, 31)) == Decimal('0.8')
    assert rates.rate_for('JPY', date(2024, 8, 31)) is None
    assert rates.rate_for('USD', date(2024, 9, 1)) is None
    assert calls == [(2024, 8), (2024, 8), (2024, 8), (2024, 9)]


def test_hmrc_rates_before_2021():
    assert currency.hmrc_exchange_rates(2020, 12) == {}


def test_hmrc_rates_online(online):
    if not online:
        pytest.skip('offline')
    rate = HmrcRates().rate_for('USD', date(2024, 8, 15))
    assert rate is not None
    assert rate * Decimal('1.3033') == pytest.approx(Decimal(1))


@pytest.fixture
def hmrc_cache():
    currency.hmrc_exchange_rates.cache_clear()
    yield
    currency.hmrc_exchange_rates.cache_clear()


hmrc_xml = b'''<?xml version="1.0" encoding="UTF-8"?>
<exchangeRateMonthList Period="01/Aug/2024 to 31/Aug/2024">
  <exchangeRate>
    <countryName>USA</countryName>
    <countryCode>US</countryCode>
    <currencyName>Dollar </currencyName>
    <currencyCode>USD</currencyCode>
    <rateNew>1.25</rateNew>
  </exchangeRate>
</exchangeRateMonthList>
'''


def response(status_code, content=b''):
    r = requests.Response()
    r.status_code = status_code
    r._content = content
    r.url = 'https://www.trade-tariff.service.gov.uk/'
    return r


def test_hmrc_rates_http_error_not_cached(monkeypatch, hmrc_cache):
    responses = [response(503), response(200, hmrc_xml)]
    calls = []

    def get(url, **kwargs):
        assert kwargs['timeout'] == currency.timeout
        calls.append(url)
        return responses.pop(0)

    monkeypatch.setattr(currency._session, 'get', get)

    rates = HmrcRates()
    with pytest.raises(RateUnavailable) as excinfo:
        rates.rate_for('USD', date(2024, 8, 1))
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)

    assert rates.rate_for('USD', date(2024, 8, 1)) == Decimal('0.8')
    assert rates.rate_for('USD', date(2024, 8, 31)) == Decimal('0.8')
    assert len(calls) == 2


def test_hmrc_rates_connection_error(monkeypatch, hmrc_cache):

    def get(url, **kwargs):
        raise requests.ConnectionError('unreachable')

    monkeypatch.setattr(currency._session, 'get', get)

    with pytest.raises(RateUnavailable) as excinfo:
        Normalizer(HmrcRates()).convert(Decimal(1), 'USD', date(2024, 8, 1))
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@pytest.mark.parametrize("home_currency", ['EUR', 'USD'])
def test_hmrc_rates_home_currency(home_currency):
    with pytest.raises(ValueError):
        Normalizer(HmrcRates(), home_currency)
    # Other sources are not tied to the pound
    Normalizer(FixedRates({'GBP': Decimal('1.2')}), home_currency)
