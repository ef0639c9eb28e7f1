import pytest

from supermarket_chain.domain.chain import SupermarketChain
from supermarket_chain.domain.models import Product
from supermarket_chain.domain.supermarket import Supermarket


@pytest.fixture
def meat():
    return Product(id=1, name="Meat", price=10.0)


@pytest.fixture
def fish():
    return Product(id=2, name="Fish", price=20.0)


@pytest.fixture
def chicken():
    return Product(id=3, name="Chicken", price=5.0)


@pytest.fixture
def super_a(meat, fish):
    store = Supermarket(1, "Supermarket A")
    store.register_product(meat)
    store.register_product(fish)
    return store


@pytest.fixture
def super_b(meat, chicken):
    store = Supermarket(2, "Supermarket B")
    store.register_product(meat)
    store.register_product(chicken)
    return store


@pytest.fixture
def chain(super_a, super_b):
    return SupermarketChain([super_a, super_b])
