#!/usr/bin/env python3
#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#

#
# UK capital gains tax calculator for shares vested through Charles Schwab.
#
# Example:
#
#   cgtcalc.py --symbol GOOG --sell-date 2023-03-01 --shares-to-sell 40 \
#       --path-to-csv EquityAwardsCenter_EquityDetails.csv \
#       --sale-price 92.50 --taxpayer-status higher
#


import argparse
import datetime
import logging
import sys

from decimal import Decimal, InvalidOperation

from currency import RateSource, FixedRates, HistoricRates, HmrcRates, Normalizer
from errors import CalculationError
from gains import Config, GainCalculator, GainReport, TaxpayerStatus
from ledger import Ledger, Transaction
from matching import Matcher, validate
from prices import HistoricPrices
from report import Report, TextReport, HtmlReport

import schwab
import trades


logger = logging.getLogger('cgtcalc')


def calculate(
    ledger:Ledger,
    sell_date:datetime.date,
    quantity:Decimal,
    sale_unit_price:Decimal,
    sale_currency:str,
    taxpayer_status:TaxpayerStatus,
    config:Config,
    rate_source:RateSource,
) -> GainReport:
    '''Tax due on selling quantity shares of the ledger's symbol on sell_date.'''

    validate(ledger, sell_date, quantity)

    normalizer = Normalizer(rate_source, config.home_currency)

    matcher = Matcher(ledger, normalizer)
    unit_proceeds = normalizer.convert(sale_unit_price, sale_currency, sell_date)
    matched_lots = matcher.match(sell_date, quantity, unit_proceeds)

    calculator = GainCalculator(config, normalizer)
    result = calculator.compute(matched_lots, sale_unit_price, sale_currency, sell_date, taxpayer_status, symbol=ledger.symbol)
    result.pool_updates = matcher.pool_updates

    return result


def load_transactions(filename:str) -> list[Transaction]:
    logger.info(f'Loading transactions from {filename}')
    with open(filename, 'rt', newline='') as stream:
        if filename.lower().endswith('.csv'):
            return schwab.parse_equity_details(stream)
        else:
            return trades.parse(stream)


def amount(s:str) -> Decimal:
    try:
        return Decimal(s)
    except InvalidOperation:
        raise ValueError(s) from None


def currency_pair(s:str) -> tuple[str, str]:
    currency, sep, value = s.partition('=')
    if not sep or len(currency) != 3:
        raise ValueError(s)
    return currency.upper(), value


def make_rate_source(args:argparse.Namespace) -> RateSource:
    if args.rate:
        return FixedRates({currency: amount(value) for currency, value in args.rate})
    if args.rates is not None:
        currency, filename = args.rates
        with open(filename, 'rt', newline='') as stream:
            return HistoricRates(currency, stream)
    return HmrcRates()


def main() -> None:
    argparser = argparse.ArgumentParser(description='UK capital gains tax on a disposal of shares.')
    argparser.add_argument('--symbol', required=True, help='stock symbol')
    argparser.add_argument('--sell-date', required=True, type=datetime.date.fromisoformat, help='sell date (YYYY-MM-DD)')
    argparser.add_argument('--shares-to-sell', required=True, type=amount, help='number of shares to sell')
    argparser.add_argument('--path-to-csv', required=True, metavar='FILENAME', help='EquityAwardsCenter_EquityDetails_*.csv export, or a trade file')
    argparser.add_argument('--taxpayer-status', required=True, choices=['basic', 'higher'], help='income tax band')
    argparser.add_argument('--annual-exemption-amount', type=amount, default=None, help='annual exempt amount (default: that of the tax year)')
    argparser.add_argument('--basic-rate', type=amount, default=None, help='basic CGT rate, e.g. 0.18')
    argparser.add_argument('--higher-rate', type=amount, default=None, help='higher CGT rate, e.g. 0.24')
    argparser.add_argument('--home-currency', default=None, help='currency gains are taxed in')
    price = argparser.add_mutually_exclusive_group(required=True)
    price.add_argument('--sale-price', type=amount, help='sale price per share')
    price.add_argument('--prices', metavar='FILENAME', help='Yahoo Finance price history CSV of the symbol, downloaded beforehand (it is not fetched automatically)')
    argparser.add_argument('--sale-currency', default='USD', help='currency of the sale price')
    rates = argparser.add_mutually_exclusive_group()
    rates.add_argument('--rate', type=currency_pair, action='append', metavar='CUR=RATE', help='fixed exchange rate into the home currency')
    rates.add_argument('--rates', type=currency_pair, metavar='CUR=FILENAME', help='Yahoo Finance exchange rate history (e.g., USDGBP=X)')
    argparser.add_argument('--format', choices=['text', 'html'], default='text')
    argparser.add_argument('-v', '--verbose', action='store_true', default=False)
    args = argparser.parse_args()

    logging.basicConfig(
        format='%(asctime)s %(name)s %(levelname)s %(message)s',
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    try:
        config = Config.for_date(
            args.sell_date,
            home_currency=args.home_currency.upper() if args.home_currency else None,
            annual_allowance=args.annual_exemption_amount,
            basic_rate=args.basic_rate,
            higher_rate=args.higher_rate,
        )
    except ValueError as ex:
        argparser.error(str(ex))

    try:
        rate_source = make_rate_source(args)
    except ValueError as ex:
        argparser.error(f'invalid exchange rate: {ex}')
    if isinstance(rate_source, HmrcRates) and config.home_currency != HmrcRates.home_currency:
        argparser.error(f'HMRC exchange rates only convert into {HmrcRates.home_currency}; use --rate or --rates for {config.home_currency}')

    taxpayer_status = TaxpayerStatus[args.taxpayer_status.upper()]
    sale_currency = args.sale_currency.upper()

    try:
        ledger = Ledger.for_symbol(args.symbol, load_transactions(args.path_to_csv))

        if args.sale_price is not None:
            sale_price = args.sale_price
        else:
            with open(args.prices, 'rt', newline='') as stream:
                sale_price = HistoricPrices(args.symbol, stream).price_for(args.symbol, args.sell_date)

        result = calculate(
            ledger,
            args.sell_date,
            args.shares_to_sell,
            sale_price,
            sale_currency,
            taxpayer_status,
            config,
            rate_source,
        )
    except CalculationError as ex:
        sys.stderr.write(f'error: {ex}\n')
        sys.exit(1)

    report: Report
    if args.format == 'text':
        report = TextReport(sys.stdout)
    else:
        assert args.format == 'html'
        report = HtmlReport(sys.stdout)
    result.write(report)


if __name__ == '__main__':
    main()
