"""Block-structured solution of the static model.

With ``options.block`` the static system is permuted into block-lower-
triangular form and solved one block at a time:

1. The sparsity pattern of the Jacobian, read at the initial guess and at a
   nearby point, is matched
   (``scipy.sparse.csgraph.maximum_bipartite_matching``) so that every
   equation is paired with a variable it contains.
2. The dependency graph "equation *i* uses the variable matched to
   equation *k*" is split into strongly connected components; each
   component is a block of simultaneous equations.
3. Blocks are ordered so that every block is solved after the blocks it
   depends on, and each is handed to :func:`~steady_py.nonlinear.solve_nonlinear`
   with the variables of the already-solved blocks held fixed.

If the pattern is structurally singular (no perfect matching) the system
is solved as a single block.  With ``options.bytecode`` alone the system
is always solved as a single block.  The block solution is checked
against the full system and re-solved as one block if it fails.  The
decomposition is cached in ``outputs.decision_rule["blocks"]``, keyed by
the endogenous variable names.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components, maximum_bipartite_matching

from .model import OutputState, SteadyStateModel
from .nonlinear import solve_nonlinear
from .options import SolveOptions

Array = np.ndarray

logger = logging.getLogger(__name__)

# Relative shift of the second point at which the Jacobian pattern is read.
_PATTERN_SHIFT = 1e-3


@dataclass(frozen=True)
class Block:
    """A set of simultaneous equations and the variables they determine."""

    equations: Array
    variables: Array

    @property
    def size(self) -> int:
        return int(self.equations.size)


def block_decomposition(jacobian: Array) -> list[Block]:
    """Split a square system into an ordered list of blocks.

    Parameters
    ----------
    jacobian : Array, shape (n, n)
        Jacobian (or any matrix with the same sparsity pattern).  Non-zero
        and non-finite entries count as incidences.

    Returns
    -------
    list of Block
        Blocks in solution order.  A single block holding the whole system
        if it is structurally singular.
    """
    jacobian = np.asarray(jacobian)
    n = jacobian.shape[0]
    everything = [Block(np.arange(n), np.arange(n))]
    if n == 0 or jacobian.shape != (n, n):
        return everything if n else []

    pattern = csr_matrix((jacobian != 0).astype(np.int8))
    match = maximum_bipartite_matching(pattern, perm_type="column")
    if np.any(match < 0):
        logger.debug("Jacobian is structurally singular; solving as one block")
        return everything

    # Column k of ``permuted`` holds the variable matched to equation k.
    permuted = csr_matrix(pattern[:, match])
    n_comp, labels = connected_components(permuted, directed=True, connection="strong")

    # Edge comp(i) -> comp(k) when equation i uses the variable of equation k:
    # comp(k) must be solved first.
    rows, cols = permuted.nonzero()
    depends_on: list[set[int]] = [set() for _ in range(n_comp)]
    for i, k in zip(rows, cols):
        if labels[i] != labels[k]:
            depends_on[labels[i]].add(int(labels[k]))

    order: list[int] = []
    done: set[int] = set()
    pending = set(range(n_comp))
    while pending:
        ready = sorted(c for c in pending if depends_on[c] <= done)
        order.extend(ready)
        done.update(ready)
        pending.difference_update(ready)

    blocks = []
    for comp in order:
        equations = np.flatnonzero(labels == comp)
        blocks.append(Block(equations=equations, variables=match[equations]))
    return blocks


def solve_block_structured(
    ys_init: Array,
    exo_ss: Array,
    params: Array,
    options: SolveOptions,
    model: SteadyStateModel,
    outputs: OutputState,
) -> tuple[Array, bool]:
    """Solve the full static system with the block or bytecode strategy.

    After the last block the whole system is checked again, since a block
    solved late may move a variable that an earlier equation depends on.
    If the check fails the full system is solved as a single block,
    starting from the block solution.

    Returns
    -------
    ys : Array
        Last iterate.
    unsolved : bool
        True if a block failed or the full residual exceeds
        ``options.solve_tolf``.
    """
    ys = np.asarray(ys_init, dtype=float).reshape(-1).copy()
    whole = [Block(np.arange(ys.size), np.arange(ys.size))]

    if options.block:
        blocks = outputs.decision_rule.get("blocks")
        if blocks is None or outputs.decision_rule.get("blocks_endo_names") != model.endo_names:
            blocks = block_decomposition(_incidence_pattern(ys, exo_ss, params, model))
            outputs.decision_rule["blocks"] = blocks
            outputs.decision_rule["blocks_endo_names"] = model.endo_names
    else:
        blocks = whole

    ys, unsolved = _solve_blocks(ys, exo_ss, params, options, model, blocks)
    if unsolved or _solves_static_model(ys, exo_ss, params, options, model):
        return ys, unsolved

    if len(blocks) > 1:
        logger.warning(
            "Block solution does not solve the full system; solving it as one block"
        )
        ys, unsolved = _solve_blocks(ys, exo_ss, params, options, model, whole)
        if unsolved or _solves_static_model(ys, exo_ss, params, options, model):
            return ys, unsolved
    return ys, True


def _incidence_pattern(
    ys: Array, exo_ss: Array, params: Array, model: SteadyStateModel
) -> Array:
    """Union of the Jacobian patterns at *ys* and at a nearby point.

    A derivative can vanish at one point (``d(b**2)/db`` at ``b = 0``)
    without the equation being independent of the variable.
    """
    n = ys.size
    _, jacobian = model.static(ys, exo_ss, params)
    pattern = np.asarray(jacobian).reshape(n, n) != 0
    shifted = ys + _PATTERN_SHIFT * (1.0 + np.abs(ys)) * np.sqrt(np.arange(2.0, n + 2.0))
    _, jacobian = model.static(shifted, exo_ss, params)
    return pattern | (np.asarray(jacobian).reshape(n, n) != 0)


def _solve_blocks(
    ys: Array,
    exo_ss: Array,
    params: Array,
    options: SolveOptions,
    model: SteadyStateModel,
    blocks: list[Block],
) -> tuple[Array, bool]:
    ys = ys.copy()
    for number, block in enumerate(blocks, start=1):
        def func(x: Array, block: Block = block) -> tuple[Array, Array]:
            y = ys.copy()
            y[block.variables] = x
            r, j = model.static(y, exo_ss, params)
            r = np.asarray(r, dtype=float).reshape(-1)
            j = np.asarray(j, dtype=float).reshape(r.size, -1)
            return r[block.equations], j[np.ix_(block.equations, block.variables)]

        x, unsolved = solve_nonlinear(func, ys[block.variables], options)
        ys[block.variables] = x
        if unsolved:
            logger.warning(
                "Block %d of %d (equations %s) could not be solved",
                number,
                len(blocks),
                ", ".join(str(i + 1) for i in block.equations),
            )
            return ys, True
    return ys, False


def _solves_static_model(
    ys: Array, exo_ss: Array, params: Array, options: SolveOptions, model: SteadyStateModel
) -> bool:
    residual, _ = model.static(ys, exo_ss, params)
    residual = np.asarray(residual, dtype=float).reshape(-1)
    return bool(np.all(np.abs(residual) <= options.solve_tolf))
