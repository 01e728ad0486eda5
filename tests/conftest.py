import pytest

from tests.models import Animal, Person, make_blog


@pytest.fixture
def blog():
    return make_blog()


@pytest.fixture
def alice():
    return Person(id="42", name="Alice", pet=Animal(id="7", name="Rex"))
