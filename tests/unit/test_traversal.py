"""Unit tests for cycle detection and topological ordering."""
import pytest

from pmo_scheduling.cpm.errors import CycleDetected, SchedulingError
from pmo_scheduling.cpm.models import SchedulableItem
from pmo_scheduling.cpm.network import DependencyGraph
from pmo_scheduling.cpm.traversal import (
    find_cycle,
    find_path,
    validate_acyclic,
    topological_sort,
    reverse_topological_sort,
    sort_or_fallback,
    would_create_cycle,
    check_new_edge,
)


def _assert_topological(graph, order):
    position = {item_id: i for i, item_id in enumerate(order)}
    for u, v in graph.edges():
        assert position[u] < position[v], f"{u} should precede {v}"


class TestCycleDetection:
    """Test cycle detection."""

    def test_acyclic_graph(self, abc_items):
        """A DAG has no cycle."""
        graph = DependencyGraph(abc_items)
        assert find_cycle(graph) is None
        assert validate_acyclic(graph)

    def test_three_item_cycle(self, cyclic_items):
        """The reported cycle lists its items in edge order."""
        graph = DependencyGraph(cyclic_items)
        assert find_cycle(graph) == ['X', 'Y', 'Z']
        assert not validate_acyclic(graph)

    def test_self_dependency(self):
        """An item depending on itself is a one-item cycle."""
        graph = DependencyGraph([SchedulableItem(id='S', dependencies=('S',))])
        assert find_cycle(graph) == ['S']

    def test_empty_graph(self):
        """An empty graph is acyclic."""
        assert find_cycle(DependencyGraph([])) is None


class TestTopologicalSort:
    """Test topological ordering."""

    def test_predecessors_first(self, abc_items):
        """Every edge points forward in the order."""
        graph = DependencyGraph(abc_items)
        order = topological_sort(graph)
        assert order == ['A', 'B', 'C', 'D']
        _assert_topological(graph, order)

    def test_dependency_declared_before_predecessor(self):
        """Input order does not matter: predecessors still come first."""
        graph = DependencyGraph([
            SchedulableItem(id='C', dependencies=('B',)),
            SchedulableItem(id='B', dependencies=('A',)),
            SchedulableItem(id='A'),
        ])
        assert topological_sort(graph) == ['A', 'B', 'C']
        assert reverse_topological_sort(graph) == ['C', 'B', 'A']

    def test_diamond(self):
        """Diamond dependencies keep the join after both branches."""
        graph = DependencyGraph([
            SchedulableItem(id='D', dependencies=('B', 'C')),
            SchedulableItem(id='B', dependencies=('A',)),
            SchedulableItem(id='C', dependencies=('A',)),
            SchedulableItem(id='A'),
        ])
        order = topological_sort(graph)
        assert sorted(order) == ['A', 'B', 'C', 'D']
        _assert_topological(graph, order)

    def test_cycle_raises(self, cyclic_items):
        """Sorting a cyclic graph raises CycleDetected with the cycle."""
        graph = DependencyGraph(cyclic_items)
        with pytest.raises(CycleDetected) as exc_info:
            topological_sort(graph)
        assert exc_info.value.cycle == ['X', 'Y', 'Z']
        assert 'X -> Y -> Z -> X' in str(exc_info.value)

    def test_cycle_error_hierarchy(self, cyclic_items):
        """CycleDetected is both a SchedulingError and a ValueError."""
        graph = DependencyGraph(cyclic_items)
        with pytest.raises(SchedulingError):
            topological_sort(graph)
        with pytest.raises(ValueError):
            topological_sort(graph)


class TestSortOrFallback:
    """Test the non-raising sort."""

    def test_dag_sorts_normally(self, abc_items):
        """A DAG returns its topological order without an error."""
        result = sort_or_fallback(DependencyGraph(abc_items))
        assert result.ok
        assert not result.used_fallback
        assert result.order == ['A', 'B', 'C', 'D']

    def test_cycle_falls_back_to_insertion_order(self, cyclic_items):
        """A cycle yields every item in input order plus the error."""
        result = sort_or_fallback(DependencyGraph(cyclic_items))
        assert not result.ok
        assert result.used_fallback
        assert result.order == ['X', 'Y', 'Z', 'W']
        assert result.cycle_error.cycle == ['X', 'Y', 'Z']

    def test_cycle_without_fallback(self, cyclic_items):
        """With fallback off the order is empty, never partial."""
        result = sort_or_fallback(DependencyGraph(cyclic_items), fallback=False)
        assert result.order == []
        assert isinstance(result.cycle_error, CycleDetected)


class TestNewEdgeChecks:
    """Test cycle checks for edges not yet in the graph."""

    def test_find_path(self, abc_items):
        """Paths follow dependency direction only."""
        graph = DependencyGraph(abc_items)
        assert find_path(graph, 'A', 'C') == ['A', 'C']
        assert find_path(graph, 'C', 'A') is None
        assert find_path(graph, 'A', 'D') is None

    def test_would_create_cycle(self, abc_items):
        """A back edge closes a cycle, a forward or unrelated edge does not."""
        graph = DependencyGraph(abc_items)
        assert would_create_cycle(graph, 'C', 'A')
        assert not would_create_cycle(graph, 'A', 'D')
        assert not would_create_cycle(graph, 'B', 'C')

    def test_self_edge(self, abc_items):
        """Making an item depend on itself is a cycle."""
        assert would_create_cycle(DependencyGraph(abc_items), 'A', 'A')

    def test_unknown_ids(self, abc_items):
        """Unknown ids never form edges."""
        graph = DependencyGraph(abc_items)
        assert not would_create_cycle(graph, 'A', 'Z')
        check_new_edge(graph, 'Z', 'A')

    def test_check_new_edge_reports_cycle(self, abc_items):
        """The refused edge and the cycle it closes are reported."""
        graph = DependencyGraph(abc_items)
        with pytest.raises(CycleDetected) as exc_info:
            check_new_edge(graph, 'C', 'A')
        assert exc_info.value.edge == ('C', 'A')
        assert exc_info.value.cycle == ['C', 'A']
        assert 'adding C -> A' in str(exc_info.value)


class TestTransitiveBackEdge:
    """Test refusing an edge that closes a cycle through intermediate items."""

    @pytest.fixture
    def chain(self):
        """A -> B -> C: B depends on A and C depends on B."""
        return DependencyGraph([
            SchedulableItem(id='A'),
            SchedulableItem(id='B', dependencies=('A',)),
            SchedulableItem(id='C', dependencies=('B',)),
        ])

    def test_multi_hop_path(self, chain):
        """The path walk follows every hop."""
        assert find_path(chain, 'A', 'C') == ['A', 'B', 'C']

    def test_back_edge_would_create_cycle(self, chain):
        """C -> A closes a cycle because A already reaches C through B."""
        assert would_create_cycle(chain, 'C', 'A')
        assert not would_create_cycle(chain, 'A', 'C')

    def test_check_new_edge_reports_full_cycle(self, chain):
        """The reported cycle lists every item in edge order."""
        with pytest.raises(CycleDetected) as exc_info:
            check_new_edge(chain, 'C', 'A')
        assert exc_info.value.cycle == ['C', 'A', 'B']
        assert exc_info.value.edge == ('C', 'A')
        assert 'C -> A -> B -> C' in str(exc_info.value)
