import pytest

from chainkg.datalog.engine.config import config
from chainkg.datalog.model import relation, rule, val


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the default configuration."""
    config.reset()
    yield
    config.reset()


@pytest.fixture
def lt():
    return relation("lt", "{} < {}")


@pytest.fixture
def gt():
    return relation("gt", "{} > {}")


@pytest.fixture
def numbers():
    return {n: val(n) for n in range(1, 5)}


@pytest.fixture
def less_than_rules(lt, gt):
    return [
        rule("transitive", lambda a: lt(a, lt(lt(a)))),
        rule("inverse", lambda a: gt(lt(a), a)),
    ]
