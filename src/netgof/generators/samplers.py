"""
Sample Generators Module
========================

This module defines the ``SampleGenerator`` capability consumed by the
simulation runner and provides adapters around the standard NetworkX
random graph models.

A sample generator is any callable taking a ``numpy.random.Generator``
(the randomness context for one draw) and returning an ``nx.Graph``.
New model families, including the simulate step of a fitted exponential
random graph model, plug in through ``seeded`` or a plain function
without touching the runner.

Scale matching is the caller's responsibility: the ``*_like`` factories
read node count, edge count or degree sequence off the observed graph so
that comparisons are meaningful.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

import networkx as nx
import numpy as np

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_SEED_BOUND = 2**31


class SampleGenerator(Protocol):
    """Produces one random graph per call from the given randomness context."""

    def __call__(self, rng: np.random.Generator) -> nx.Graph:
        ...


def draw_seed(rng: np.random.Generator) -> int:
    """Draw an integer seed for a library routine from ``rng``."""
    return int(rng.integers(0, _SEED_BOUND))


def seeded(func: Callable[..., nx.Graph], **kwargs: Any) -> SampleGenerator:
    """
    Adapt a callable accepting a ``seed`` keyword.

    Parameters
    ----------
    func : Callable
        Graph producer, e.g. a NetworkX generator or the simulate step of
        a fitted model
    **kwargs
        Fixed keyword arguments passed on every call

    Returns
    -------
    SampleGenerator
        Generator drawing a fresh seed from the randomness context per call

    Examples
    --------
    >>> import networkx as nx
    >>> gen = seeded(nx.gnm_random_graph, n=10, m=15)
    >>> gen(np.random.default_rng(0)).number_of_edges()
    15
    """

    def draw(rng: np.random.Generator) -> nx.Graph:
        return func(seed=draw_seed(rng), **kwargs)

    draw.__name__ = getattr(func, "__name__", "seeded")
    return draw


def zero_argument(func: Callable[[], nx.Graph]) -> SampleGenerator:
    """
    Adapt a zero-argument graph producer.

    The randomness context is ignored, so reproducibility depends on
    ``func`` managing its own state.
    """

    def draw(rng: np.random.Generator) -> nx.Graph:
        return func()

    draw.__name__ = getattr(func, "__name__", "zero_argument")
    return draw


def erdos_renyi_gnm(n: int, m: int) -> SampleGenerator:
    """
    Uniform random graphs with exactly ``n`` nodes and ``m`` edges.

    Examples
    --------
    >>> gen = erdos_renyi_gnm(20, 30)
    >>> G = gen(np.random.default_rng(1))
    >>> (G.number_of_nodes(), G.number_of_edges())
    (20, 30)
    """
    _check_positive("n", n)
    max_edges = n * (n - 1) // 2
    if not 0 <= m <= max_edges:
        raise ConfigurationError(f"m must lie in [0, {max_edges}] for n={n}, got {m}")
    return seeded(nx.gnm_random_graph, n=n, m=m)


def erdos_renyi_gnp(n: int, p: float) -> SampleGenerator:
    """Random graphs on ``n`` nodes with independent edge probability ``p``."""
    _check_positive("n", n)
    _check_probability("p", p)
    return seeded(nx.gnp_random_graph, n=n, p=p)


def configuration_model(
    degree_sequence: Sequence[int],
    method: str = "erased",
) -> SampleGenerator:
    """
    Random graphs conditioned on a degree sequence.

    Parameters
    ----------
    degree_sequence : Sequence[int]
        Prescribed degrees
    method : str, optional
        ``"erased"``: configuration model with multi-edges and self-loops
        removed, so degrees are matched approximately (default).
        ``"exact"``: simple graphs with exactly the prescribed degrees;
        individual draws may fail and are retried by the runner.

    Returns
    -------
    SampleGenerator
    """
    degrees = [int(d) for d in degree_sequence]
    if not degrees:
        raise ConfigurationError("degree_sequence must not be empty")
    if any(d < 0 for d in degrees):
        raise ConfigurationError("degree_sequence must be non-negative")
    if sum(degrees) % 2 != 0:
        raise ConfigurationError("degree_sequence must have an even sum")

    if method == "erased":

        def draw(rng: np.random.Generator) -> nx.Graph:
            M = nx.configuration_model(degrees, seed=draw_seed(rng))
            G = nx.Graph(M)
            G.remove_edges_from(nx.selfloop_edges(G))
            return G

    elif method == "exact":

        def draw(rng: np.random.Generator) -> nx.Graph:
            return nx.random_degree_sequence_graph(degrees, seed=draw_seed(rng))

    else:
        raise ConfigurationError(f"Unknown configuration model method: {method}")

    draw.__name__ = f"configuration_model_{method}"
    return draw


def small_world(n: int, k: int, p: float) -> SampleGenerator:
    """Watts-Strogatz small-world graphs (ring lattice with rewiring probability ``p``)."""
    _check_positive("n", n)
    if k < 1 or k >= n:
        raise ConfigurationError(f"k must lie in [1, n), got k={k}, n={n}")
    _check_probability("p", p)
    return seeded(nx.watts_strogatz_graph, n=n, k=k, p=p)


def preferential_attachment(n: int, m: int) -> SampleGenerator:
    """Barabasi-Albert graphs growing by ``m`` edges per new node."""
    _check_positive("n", n)
    if m < 1 or m >= n:
        raise ConfigurationError(f"m must lie in [1, n), got m={m}, n={n}")
    return seeded(nx.barabasi_albert_graph, n=n, m=m)


def degree_preserving_rewiring(
    G: nx.Graph,
    nswap: Optional[int] = None,
) -> SampleGenerator:
    """
    Randomize ``G`` by double edge swaps, preserving every node degree.

    Parameters
    ----------
    G : nx.Graph
        Reference graph, copied before every draw and never mutated
    nswap : int, optional
        Number of swaps per draw (default: 10 * number of edges)
    """
    if G.number_of_edges() < 2:
        raise ConfigurationError("Rewiring needs a graph with at least two edges")
    template = nx.Graph(G)
    if nswap is None:
        nswap = 10 * template.number_of_edges()
    max_tries = 100 * nswap

    def draw(rng: np.random.Generator) -> nx.Graph:
        H = template.copy()
        nx.double_edge_swap(H, nswap=nswap, max_tries=max_tries, seed=draw_seed(rng))
        return H

    draw.__name__ = "degree_preserving_rewiring"
    return draw


def gnm_like(G: nx.Graph) -> SampleGenerator:
    """G(n, m) generator matching the node and edge count of ``G``."""
    return erdos_renyi_gnm(G.number_of_nodes(), G.number_of_edges())


def gnp_like(G: nx.Graph) -> SampleGenerator:
    """G(n, p) generator matching the node count and density of ``G``."""
    return erdos_renyi_gnp(G.number_of_nodes(), nx.density(G))


def configuration_like(G: nx.Graph, method: str = "erased") -> SampleGenerator:
    """Configuration model generator matching the degree sequence of ``G``."""
    return configuration_model([d for _, d in G.degree()], method=method)


def small_world_like(G: nx.Graph, p: float = 0.05) -> SampleGenerator:
    """
    Small-world generator matching the node count and mean degree of ``G``.

    The lattice degree ``k`` is the mean degree rounded to an even number
    (at least 2), since each node links to ``k // 2`` neighbours per side.
    """
    n = G.number_of_nodes()
    mean_degree = 2 * G.number_of_edges() / n if n else 0.0
    k = max(2, 2 * int(round(mean_degree / 2)))
    return small_world(n, min(k, n - 1), p)


def preferential_attachment_like(G: nx.Graph) -> SampleGenerator:
    """Preferential attachment generator matching the node count and edges per node of ``G``."""
    n = G.number_of_nodes()
    m = max(1, int(round(G.number_of_edges() / n))) if n else 1
    return preferential_attachment(n, min(m, n - 1))


def check_scale(
    G: nx.Graph,
    generator: SampleGenerator,
    seed: Optional[int] = None,
) -> bool:
    """
    Draw one sample and compare its node count with ``G``.

    Returns
    -------
    bool
        True when the node counts agree; a warning is logged otherwise
    """
    sample = generator(np.random.default_rng(seed))
    matches = sample.number_of_nodes() == G.number_of_nodes()
    if not matches:
        logger.warning(
            f"Generator scale mismatch: sample has {sample.number_of_nodes()} nodes, "
            f"observed graph has {G.number_of_nodes()}"
        )
    return matches


def _check_positive(name: str, value: int) -> None:
    if value < 1:
        raise ConfigurationError(f"{name} must be positive, got {value}")


def _check_probability(name: str, value: float) -> None:
    if not 0 <= value <= 1:
        raise ConfigurationError(f"{name} must lie in [0, 1], got {value}")


MODEL_FACTORIES: Dict[str, Callable[..., SampleGenerator]] = {
    "gnm": gnm_like,
    "gnp": gnp_like,
    "configuration": configuration_like,
    "small_world": small_world_like,
    "preferential_attachment": preferential_attachment_like,
    "rewiring": degree_preserving_rewiring,
}


def available_models() -> List[str]:
    """Names accepted by ``model_like``."""
    return list(MODEL_FACTORIES)


def model_like(name: str, G: nx.Graph, **kwargs: Any) -> SampleGenerator:
    """Build a generator of the named model family matched to ``G``."""
    try:
        factory = MODEL_FACTORIES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown model '{name}'. Available: {available_models()}"
        ) from None
    return factory(G, **kwargs)
