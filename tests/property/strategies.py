"""
Custom Hypothesis strategies for listener and configuration data.
"""
from hypothesis import strategies as st

from mvc.application import DEFAULT_LISTENERS

EXTRA_LISTENERS = ["AuditListener", "CacheListener", "MetricsListener", "CsrfListener"]

LISTENER_POOL = list(DEFAULT_LISTENERS) + EXTRA_LISTENERS


def priority_strategy():
    """Listener priorities, including the framework's extreme values."""
    return st.one_of(
        st.integers(min_value=-100, max_value=100),
        st.sampled_from([-10000, 10000]),
    )


def listener_names_strategy(pool=None, max_size=8):
    """Lists of listener names, duplicates allowed."""
    return st.lists(st.sampled_from(pool or LISTENER_POOL), max_size=max_size)


def identifier_strategy():
    return st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz", min_size=1, max_size=12)


config_keys = st.text(alphabet="abcdefghij", min_size=1, max_size=3)
config_scalars = st.one_of(st.integers(), st.booleans(), st.text(max_size=5))


@st.composite
def config_strategy(draw, max_depth=2):
    """Nested configuration mappings with scalar and list leaves."""
    leaves = st.one_of(config_scalars, st.lists(config_scalars, max_size=4))
    if max_depth <= 0:
        return draw(st.dictionaries(config_keys, leaves, max_size=4))
    children = st.one_of(leaves, config_strategy(max_depth=max_depth - 1))
    return draw(st.dictionaries(config_keys, children, max_size=4))
