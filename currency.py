'''Currency conversion into the home currency.'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import csv
import datetime
import functools
import io
import logging
import re
import typing

import xml.etree.ElementTree

import requests

from decimal import Decimal, InvalidOperation

from errors import RateUnavailable


__all__ = [
    'RateSource',
    'FixedRates',
    'HistoricRates',
    'HmrcRates',
    'Normalizer',
]


logger = logging.getLogger('currency')


_currency_re = re.compile(r'^[A-Z]{3}$')


class RateSource(typing.Protocol):

    # Home currency units per one unit of currency, or None when not found
    def rate_for(self, currency:str, date:datetime.date) -> Decimal|None:  # pragma: no cover
        ...


class FixedRates:
    '''Date independent rates.'''

    def __init__(self, rates:dict[str, Decimal]):
        self.rates = dict(rates)

    def rate_for(self, currency:str, date:datetime.date) -> Decimal|None:
        return self.rates.get(currency)


class HistoricRates:
    '''Daily rates for a single currency, as in a Yahoo Finance history CSV
    (e.g., USDGBP=X), keyed by exact date.'''

    def __init__(self, currency:str, stream:typing.TextIO):
        self.currency = currency
        self.rates: dict[datetime.date, Decimal] = {}
        for row in csv.DictReader(stream):
            date = datetime.date.fromisoformat(row['Date'])
            try:
                rate = Decimal(row['Close'])
            except InvalidOperation:
                # Yahoo writes "null" for days without quotes
                continue
            self.rates[date] = rate
        logger.debug(f'Loaded {len(self.rates)} {currency} rates')

    def rate_for(self, currency:str, date:datetime.date) -> Decimal|None:
        if currency != self.currency:
            return None
        return self.rates.get(date)


# https://requests.readthedocs.io/en/latest/user/advanced/#keep-alive
_session = requests.Session()

# Seconds
timeout = 30


# https://www.trade-tariff.service.gov.uk/exchange_rates
@functools.lru_cache
def hmrc_exchange_rates(year:int, month:int) -> dict[str, Decimal]:
    '''HMRC monthly rates, in foreign currency units per pound.

    Failed requests raise requests.RequestException and are not cached.'''
    assert 1 <= month and month <= 12
    if year < 2021:
        return {}
    url = f'https://www.trade-tariff.service.gov.uk/api/v2/exchange_rates/files/monthly_xml_{year}-{month}.xml'
    logger.info(f'Getting HMRC exchange rates for {year}-{month:02d}')
    headers = {'user-agent': 'Mozilla/5.0'}
    r = _session.get(url, headers=headers, stream=False, timeout=timeout)
    if not r.ok:
        logger.warning(f'{url}: HTTP {r.status_code}')
    r.raise_for_status()
    stream = io.BytesIO(r.content)
    tree = xml.etree.ElementTree.parse(stream)
    root = tree.getroot()
    rates: dict[str, Decimal] = {}
    for node in root:
        currencyCode = node.find('currencyCode')
        assert currencyCode is not None
        currency = currencyCode.text
        assert currency is not None
        rateNew = node.find('rateNew')
        assert rateNew is not None
        rateText = rateNew.text
        assert rateText is not None
        rates[currency] = Decimal(rateText)
    return rates


class HmrcRates:
    '''HMRC monthly exchange rates. Every day of a published month has a rate.'''

    # HMRC only publishes rates against the pound
    home_currency = 'GBP'

    def rate_for(self, currency:str, date:datetime.date) -> Decimal|None:
        try:
            rates = hmrc_exchange_rates(date.year, date.month)
        except requests.RequestException as ex:
            logger.error(f'HMRC exchange rates for {date.year}-{date.month:02d} unavailable: {ex}')
            raise RateUnavailable(currency, date) from ex
        try:
            rate = rates[currency]
        except KeyError:
            return None
        return Decimal(1) / rate


class Normalizer:

    def __init__(self, rate_source:RateSource, home_currency:str='GBP'):
        if isinstance(rate_source, HmrcRates) and home_currency != HmrcRates.home_currency:
            raise ValueError(f'HMRC exchange rates convert into {HmrcRates.home_currency}, not {home_currency}')
        self.rate_source = rate_source
        self.home_currency = home_currency

    def convert(self, amount:Decimal, currency:str, date:datetime.date) -> Decimal:
        if not _currency_re.match(currency):
            raise ValueError(f'invalid currency code {currency!r}')
        if currency == self.home_currency:
            return amount
        rate = self.rate_source.rate_for(currency, date)
        if rate is None:
            raise RateUnavailable(currency, date)
        return amount * rate
