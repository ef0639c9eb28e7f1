import logging
import threading

from fastapi import Depends

from supermarket_chain.domain.chain import SupermarketChain

logger = logging.getLogger(__name__)


class ChainHolder:
    """Holds the chain served over HTTP and swaps it in one step on import."""

    def __init__(self, chain: SupermarketChain | None = None):
        self._chain = chain if chain is not None else SupermarketChain()
        self._lock = threading.Lock()

    @property
    def chain(self) -> SupermarketChain:
        with self._lock:
            return self._chain

    def swap(self, chain: SupermarketChain) -> SupermarketChain:
        with self._lock:
            previous, self._chain = self._chain, chain
        logger.info("Serving chain with %d supermarkets (was %d)", len(chain), len(previous))
        return previous


chain_holder = ChainHolder()


def get_chain_holder() -> ChainHolder:
    return chain_holder


def get_chain(holder: ChainHolder = Depends(get_chain_holder)) -> SupermarketChain:
    return holder.chain
