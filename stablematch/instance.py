"""Stable matching library for python3.

Create and solve a two-sided stable matching instance with deferred acceptance.
"""

import numbers

import numpy as np

import stablematch.core
from stablematch.core import ConfigurationError

__all__ = [
    "MatchingInstance", "MatchingSolution", "solve", "run"
]


def _check_permutation(li, n, side, idx):
  """Check that a preference list ranks every agent of the other side once."""
  if len(li) != n:
    raise ConfigurationError(
        "{0} {1} ranks {2} agents, expected {3}.".format(side, idx, len(li), n))
  for i in li:
    if isinstance(i, bool) or not isinstance(i, numbers.Integral):
      raise ConfigurationError(
          "{0} {1} ranks a non-integer identifier {2!r}.".format(side, idx, i))
    if not 0 <= i < n:
      raise ConfigurationError(
          "{0} {1} ranks an out of range identifier {2}.".format(side, idx, i))
  if len(set(li)) != len(li):
    raise ConfigurationError(
        "{0} {1} ranks some agent more than once.".format(side, idx))


def _sanity_check(num_proposer, num_responder,
                  proposer_pref_list, responder_pref_list):
  """Sanity check for construction of instances."""
  for n, side in ((num_proposer, "proposers"), (num_responder, "responders")):
    if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n <= 0:
      raise ConfigurationError(
          "Number of {0} must be a positive integer, got {1!r}.".format(side, n))
  if len(proposer_pref_list) != num_proposer:
    raise ConfigurationError("Expected {0} proposer lists, got {1}.".format(
        num_proposer, len(proposer_pref_list)))
  if len(responder_pref_list) != num_responder:
    raise ConfigurationError("Expected {0} responder lists, got {1}.".format(
        num_responder, len(responder_pref_list)))
  for m, li in enumerate(proposer_pref_list):
    _check_permutation(li, num_responder, "Proposer", m)
  for w, li in enumerate(responder_pref_list):
    _check_permutation(li, num_proposer, "Responder", w)


def _pref_list_2_rank_matrix(pref_list):
  """Transform preference lists to a matrix of positions.

  `rank[i][j]` is the position of agent j in the list of agent i, 0 being the
  most preferred.
  """
  pref = np.array(pref_list, dtype=np.int64)
  rank = np.empty_like(pref)
  rows = np.arange(pref.shape[0])[:, None]
  rank[rows, pref] = np.arange(pref.shape[1])
  return rank


class MatchingInstance():
  """Two-sided stable matching problem instance.

  An object storing the complete, strict preferences of proposers and
  responders. The lists are copied on construction and never modified.

  Attributes:
    num_proposer: Number of proposers.
    num_responder: Number of responders.
    proposer_pref_list: `proposer_pref_list[m][j]` is the j-th most preferred
      responder of proposer m. Every responder appears exactly once.
    responder_pref_list: `responder_pref_list[w][j]` is the j-th most
      preferred proposer of responder w. Every proposer appears exactly once.
    P: (num_proposer, num_responder) int64 matrix form of proposer_pref_list.
    proposer_rank: (num_proposer, num_responder) matrix, `proposer_rank[m, w]`
      is the position of w in the list of m (0 is best).
    responder_rank: (num_responder, num_proposer) matrix, `responder_rank[w, m]`
      is the position of m in the list of w (0 is best).
  """
  def __init__(self, proposer_pref_list, responder_pref_list,
               num_proposer=None, num_responder=None):
    """
    Create an instance of stable matching problem.

    Args:
      proposer_pref_list: list of permutations of `range(num_responder)`.
      responder_pref_list: list of permutations of `range(num_proposer)`.
      num_proposer: int, optional. Defaults to `len(proposer_pref_list)`.
      num_responder: int, optional. Defaults to `len(responder_pref_list)`.

    Raises:
      ConfigurationError if the sizes or the lists are malformed.
    """
    if num_proposer is None:
      num_proposer = len(proposer_pref_list)
    if num_responder is None:
      num_responder = len(responder_pref_list)
    proposer_pref_list = [list(li) for li in proposer_pref_list]
    responder_pref_list = [list(li) for li in responder_pref_list]
    _sanity_check(num_proposer, num_responder,
                  proposer_pref_list, responder_pref_list)

    self.num_proposer = int(num_proposer)
    self.num_responder = int(num_responder)
    self.proposer_pref_list = [[int(w) for w in li] for li in proposer_pref_list]
    self.responder_pref_list = [[int(m) for m in li]
                                for li in responder_pref_list]
    self.P = np.array(self.proposer_pref_list, dtype=np.int64)
    self.proposer_rank = _pref_list_2_rank_matrix(self.proposer_pref_list)
    self.responder_rank = _pref_list_2_rank_matrix(self.responder_pref_list)
    for a in (self.P, self.proposer_rank, self.responder_rank):
      a.setflags(write=False)

  def __repr__(self):
    s = "<MatchingInstance with {m} proposers and {w} responders>".format(
        m=self.num_proposer, w=self.num_responder
    )
    return s

  def responder_rank_by_proposer(self, m, w):
    """Obtains the ranking of responder w by proposer m.

    The most preferred responder is of rank 1, the second is 2, and so on...
    """
    return int(self.proposer_rank[m, w]) + 1

  def proposer_rank_by_responder(self, w, m):
    """Obtains the ranking of proposer m by responder w.

    The most preferred proposer is of rank 1, the second is 2, and so on...
    """
    return int(self.responder_rank[w, m]) + 1

  def transpose(self):
    """Returns the same market with the responders as the proposing side."""
    return MatchingInstance(self.responder_pref_list, self.proposer_pref_list)


class MatchingSolution():
  """Result of deferred acceptance on a `MatchingInstance`.

  Access by agent:
    `sol["w2"]` or `sol.w(2)` is the proposer held by responder 2, or None.
    `sol["m3"]` or `sol.m(3)` is the responder matched to proposer 3, or None.
    `sol[(m, w)]` is True if proposer m is matched to responder w.

  Attributes:
    match: list, `match[w]` is the proposer matched to responder w or None.
    proposer_match: list, `proposer_match[m]` is the responder matched to
      proposer m or None.
    rounds_used: number of rounds executed.
    final_singles: frozenset of proposers who exhausted their list unmatched.
    unmatched_responders: frozenset of responders with no proposer.
  """
  def __init__(self, S, state):
    """
    Args:
      S: a `MatchingInstance` object.
      state: the final `stablematch.core.RoundState` of a run on S.
    """
    self.rounds_used, match, singles = state.snapshot()
    self.match = list(match)
    self.proposer_match = [None] * S.num_proposer
    for w, m in enumerate(self.match):
      if m is not None:
        self.proposer_match[m] = w
    self.final_singles = singles
    self.unmatched_responders = frozenset(
        w for w, m in enumerate(self.match) if m is None)

  def __repr__(self):
    return ("<MatchingSolution of {p} pairs after {r} rounds, "
            "{s} single proposers>").format(
                p=len(self.pairs()), r=self.rounds_used,
                s=len(self.final_singles))

  def __getitem__(self, s):
    """Get matched partner.

    Args:
      s: either a tuple `(m, w)`, or a string indicating a proposer
        (e.g. "m10") or a responder (e.g. "w2").
    """
    if isinstance(s, tuple):
      m, w = s
      return self.match[w] == m
    elif isinstance(s, str):
      if s.startswith("m"):
        return self.get_proposer_match(int(s[1:]))
      elif s.startswith("w"):
        return self.get_responder_match(int(s[1:]))
    raise TypeError("Unrecognized index.")

  def get_proposer_match(self, m):
    return self.proposer_match[m]

  m = get_proposer_match

  def get_responder_match(self, w):
    return self.match[w]

  w = get_responder_match

  def pairs(self):
    """Returns the matched `(proposer, responder)` pairs, by responder."""
    return [(m, w) for w, m in enumerate(self.match) if m is not None]


def solve(ins, observer=None, abort=None, verbose=False):
  """Solve a stable matching instance with proposer-proposing deferred acceptance.

  Args:
    ins: a `MatchingInstance` object.
    observer: callable, optional
      Invoked once per round with `(round_num, match, single)`, see
      `stablematch.core.deferred_acceptance`.
    abort: callable, optional
      Checked once per round; returning True stops the run with
      `stablematch.core.MatchingAborted`.
    verbose: bool, optional
      If set to True, extra information will be printed when running the
      algorithm. Default is False.

  Returns:
    sol: a `MatchingSolution` object.
  """
  state = stablematch.core.deferred_acceptance(
      proposer_pref=ins.P,
      responder_rank=ins.responder_rank,
      observer=observer,
      abort=abort,
      verbose=verbose
  )
  sol = MatchingSolution(S=ins, state=state)
  if verbose:
    print("{0} pairs matched, {1} proposers single.".format(
        len(sol.pairs()), len(sol.final_singles)))
  return sol


def run(num_proposer, num_responder, proposer_pref_list, responder_pref_list,
        observer=None, abort=None, verbose=False):
  """Build an instance from raw preference lists and solve it.

  Raises:
    ConfigurationError before any round is executed if the input is malformed.
  """
  ins = MatchingInstance(proposer_pref_list, responder_pref_list,
                         num_proposer=num_proposer,
                         num_responder=num_responder)
  return solve(ins, observer=observer, abort=abort, verbose=verbose)
