"""Deferred acceptance implementation"""

import numba as nb
import numpy as np

__all__ = ["deferred_acceptance", "RoundState", "UNMATCHED",
           "MatchingError", "ConfigurationError", "InvariantViolation",
           "MatchingAborted"]

UNMATCHED = -1


class MatchingError(Exception):
  """Base class of all errors raised by stablematch."""


class ConfigurationError(MatchingError, ValueError):
  """Malformed market sizes or preference lists, detected before round 0."""


class InvariantViolation(MatchingError, RuntimeError):
  """The engine reached a state that the deferred acceptance invariants rule out.

  Attributes:
    state: the `RoundState` in which the violation was detected.
    round_num: the round at which it was detected.
  """
  def __init__(self, msg, state):
    super().__init__("Round {0}: {1} (holder={2}, cursor={3})".format(
        state.round_num, msg, state.holder.tolist(), state.cursor.tolist()))
    self.state = state
    self.round_num = state.round_num


class MatchingAborted(MatchingError):
  """The run was stopped by its abort signal before reaching a fixed point.

  Attributes:
    state: the partial `RoundState` at the time of the abort.
  """
  def __init__(self, state):
    super().__init__(
        "Matching aborted after {0} rounds.".format(state.round_num))
    self.state = state


class RoundState():
  """Bookkeeping of one run of the engine.

  A new state is built for each round; arrays of an older state are never
  written to once the next state exists.

  Attributes:
    cursor: int64 array of length `num_proposer`. `cursor[m]` is the number of
      proposals proposer m has made so far, i.e. the position in his preference
      list of the next responder to propose to.
    holder: int64 array of length `num_responder`. `holder[w]` is the proposer
      tentatively held by responder w, or `UNMATCHED`.
    round_num: number of rounds executed.
  """
  def __init__(self, cursor, holder, round_num=0):
    self.cursor = cursor
    self.holder = holder
    self.round_num = round_num

  @classmethod
  def initial(cls, num_proposer, num_responder):
    return cls(cursor=np.zeros(num_proposer, dtype=np.int64),
               holder=np.full(num_responder, UNMATCHED, dtype=np.int64))

  def __repr__(self):
    return "<RoundState at round {r}: {h} held, {s} single>".format(
        r=self.round_num, h=len(self.held()), s=len(self.single()))

  @property
  def num_proposer(self):
    return len(self.cursor)

  @property
  def num_responder(self):
    return len(self.holder)

  def held(self):
    """Returns the proposers currently held by some responder."""
    return self.holder[self.holder != UNMATCHED]

  def single(self):
    """Returns the proposers not held by any responder, in increasing order."""
    is_single = np.ones(self.num_proposer, dtype=np.bool_)
    is_single[self.held()] = False
    return np.nonzero(is_single)[0].astype(np.int64)

  def exhausted(self):
    """Returns the single proposers who have proposed to every responder."""
    single = self.single()
    return single[self.cursor[single] >= self.num_responder]

  def active(self):
    """Returns the single proposers who still have someone to propose to."""
    single = self.single()
    return single[self.cursor[single] < self.num_responder]

  def snapshot(self):
    """Immutable view of the state, as passed to observers.

    Returns:
      A tuple `(round_num, match, single)`, where `match[w]` is the proposer
      held by responder w or None, and `single` is a frozenset of proposers.
    """
    match = tuple(None if m == UNMATCHED else int(m) for m in self.holder)
    return self.round_num, match, frozenset(self.single().tolist())


@nb.njit('int64[:](int64[:,:], int64[:], int64[:], int64[:])')
def _resolve_offers(responder_rank, holder, offer_from, offer_to):
  """Let each responder keep the best candidate among her holder and offers.

  Offers are folded into `holder` one at a time. Since ranks are a strict order
  the survivor of each responder's pool does not depend on the folding order,
  so the outcome is that of resolving every pool at once.

  Args:
    responder_rank: (num_responder, num_proposer) matrix, where
      `responder_rank[w, m]` is the position of m in w's list (0 is best).
    holder: current holders, updated in place.
    offer_from: proposers making an offer this round.
    offer_to: `offer_to[k]` is the responder receiving the offer of
      `offer_from[k]`.

  Returns:
    The rejected proposers, displaced holders and refused offerors alike.
  """
  rejected = np.empty(len(offer_from), dtype=np.int64)
  num_rejected = 0
  for k in range(len(offer_from)):
    m = offer_from[k]
    w = offer_to[k]
    h = holder[w]
    if h < 0:
      holder[w] = m
    elif responder_rank[w, m] < responder_rank[w, h]:
      holder[w] = m
      rejected[num_rejected] = h
      num_rejected += 1
    else:
      rejected[num_rejected] = m
      num_rejected += 1
  return rejected[:num_rejected]


def _play_round(state, proposer_pref, responder_rank):
  """Run one proposal step and one resolution step.

  Returns:
    1. The `RoundState` after the round.
    2. The proposers rejected during the round.
  """
  active = state.active()
  cursor = state.cursor.copy()
  offer_to = proposer_pref[active, cursor[active]].astype(np.int64)
  cursor[active] += 1
  holder = state.holder.copy()
  rejected = _resolve_offers(responder_rank, holder, active, offer_to)
  return RoundState(cursor, holder, state.round_num + 1), rejected


def _check_invariants(prev, state, rejected):
  """Check the round boundary invariants between two consecutive states.

  Raises:
    InvariantViolation if any of them fails.
  """
  num_proposer, num_responder = state.num_proposer, state.num_responder
  held = state.held()
  if np.any(held < 0) or np.any(held >= num_proposer):
    raise InvariantViolation("held proposer out of range", state)
  if len(np.unique(held)) != len(held):
    raise InvariantViolation("a proposer is held by two responders", state)
  single = state.single()
  if len(held) + len(single) != num_proposer:
    raise InvariantViolation("held and single proposers do not partition "
                             "the proposers", state)
  if np.any(state.cursor < prev.cursor):
    raise InvariantViolation("a cursor moved backwards", state)
  if np.any(state.cursor > num_responder):
    raise InvariantViolation("a cursor ran past the end of its list", state)
  prev_held = prev.held()
  if np.any(state.cursor[prev_held] != prev.cursor[prev_held]):
    raise InvariantViolation("the cursor of a held proposer advanced", state)
  # the new singles are exactly the rejected plus those already exhausted
  expected = np.union1d(rejected, prev.exhausted())
  if not np.array_equal(np.sort(single), expected):
    raise InvariantViolation("single set does not match this round's "
                             "rejections", state)


def _check_matrices(proposer_pref, responder_rank):
  """Check that both matrices hold complete strict rankings.

  Raises:
    ConfigurationError if the shapes disagree or a row is not a permutation.
  """
  if proposer_pref.ndim != 2 or responder_rank.ndim != 2:
    raise ConfigurationError("Preference matrices must be two dimensional.")
  num_proposer, num_responder = proposer_pref.shape
  if num_proposer <= 0 or num_responder <= 0:
    raise ConfigurationError("Both sides of the market must be non-empty.")
  if not responder_rank.shape == (num_responder, num_proposer):
    raise ConfigurationError("Preference matrix dimension mismatch.")
  for a, n, side in ((proposer_pref, num_responder, "Proposer"),
                     (responder_rank, num_proposer, "Responder")):
    bad = np.nonzero(np.any(np.sort(a, axis=1) != np.arange(n), axis=1))[0]
    if len(bad) > 0:
      raise ConfigurationError(
          "{0} {1} does not rank every agent exactly once.".format(
              side, bad[0]))


def deferred_acceptance(proposer_pref, responder_rank, observer=None,
                        abort=None, verbose=False):
  """Proposer-proposing, round-synchronous deferred acceptance.

  In each round every single proposer with someone left to propose to makes
  one offer. Each responder then keeps the best of her current holder and her
  offers of the round and rejects the rest. The run ends once no single
  proposer has anyone left to propose to.

  Args:
    proposer_pref: (num_proposer, num_responder) integer matrix,
      `proposer_pref[m, j]` is the j-th most preferred responder of m.
    responder_rank: (num_responder, num_proposer) integer matrix,
      `responder_rank[w, m]` is the position of proposer m in w's list.
    observer: callable, optional
      Called once at the end of every round with
      `(round_num, match_snapshot, single_snapshot)`.
    abort: callable, optional
      Called with no argument before each round; if it returns True the run
      stops with `MatchingAborted`.
    verbose: bool, optional
      If set to True, progress is printed. Default is False.

  Returns:
    The final `RoundState`.

  Raises:
    ConfigurationError: if a matrix row is not a complete strict ranking.
    MatchingAborted: if `abort` requested a stop.
    InvariantViolation: if the engine reached an impossible state.
  """
  # writable copies, the compiled kernel does not take read-only arrays
  proposer_pref = np.array(proposer_pref, dtype=np.int64, order='C')
  responder_rank = np.array(responder_rank, dtype=np.int64, order='C')
  _check_matrices(proposer_pref, responder_rank)
  num_proposer, num_responder = proposer_pref.shape

  max_rounds = num_proposer * num_responder
  state = RoundState.initial(num_proposer, num_responder)
  while len(state.active()) > 0:
    if abort is not None and abort():
      raise MatchingAborted(state)
    if state.round_num >= max_rounds:
      raise InvariantViolation(
          "no fixed point within {0} rounds".format(max_rounds), state)
    new_state, rejected = _play_round(state, proposer_pref, responder_rank)
    _check_invariants(state, new_state, rejected)
    state = new_state
    if verbose:
      print("round #{0}: {1} held, {2} rejected, {3} single".format(
          state.round_num, len(state.held()), len(rejected),
          len(state.single())))
    if observer is not None:
      observer(*state.snapshot())

  if verbose:
    print("Fixed point reached after {0} rounds.".format(state.round_num))
  return state
