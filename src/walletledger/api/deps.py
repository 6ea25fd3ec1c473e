from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from walletledger.container import Container
from walletledger.ledger.aggregator import LedgerAggregator


@inject
def get_aggregator(
    aggregator: LedgerAggregator = Depends(Provide[Container.aggregator]),
) -> LedgerAggregator:
    return aggregator
