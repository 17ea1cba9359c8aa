"""Stable matching util functions."""

import itertools

import numpy as np

__all__ = ["blocking_pairs", "is_stable", "stable_matchings",
           "is_proposer_optimal", "RoundHistory"]


def _proposer_match(ins, match):
  proposer_match = [None] * ins.num_proposer
  for w, m in enumerate(match):
    if m is not None:
      proposer_match[m] = w
  return proposer_match


def blocking_pairs(ins, match):
  """Find the pairs that block a matching.

  A pair (m, w) not matched to each other blocks if m prefers w to his partner
  (or is single) and w prefers m to her partner (or is unmatched).

  Args:
    ins: a `MatchingInstance`.
    match: list, `match[w]` is the proposer of responder w or None.

  Returns:
    A list of `(m, w)` tuples.
  """
  assert(len(match) == ins.num_responder)
  # an unmatched agent ranks being single below everyone
  m_score = np.full(ins.num_proposer, ins.num_responder, dtype=np.int64)
  for m, w in enumerate(_proposer_match(ins, match)):
    if w is not None:
      m_score[m] = ins.proposer_rank[m, w]
  w_score = np.array(
      [ins.num_proposer if m is None else ins.responder_rank[w, m]
       for w, m in enumerate(match)], dtype=np.int64)
  m_wants = ins.proposer_rank < m_score[:, None]
  w_wants = ins.responder_rank.T < w_score[None, :]
  return [(int(m), int(w)) for m, w in np.argwhere(m_wants & w_wants)]


def is_stable(ins, match):
  return not blocking_pairs(ins, match)


def stable_matchings(ins):
  """Enumerate all stable matchings of a small instance by brute force.

  With complete preference lists every agent of the smaller side is matched in
  any stable matching, so only matchings saturating the smaller side are tried.

  Returns:
    A list of matchings in the `match[w]` format.
  """
  result = []
  if ins.num_proposer <= ins.num_responder:
    for ws in itertools.permutations(range(ins.num_responder), ins.num_proposer):
      match = [None] * ins.num_responder
      for m, w in enumerate(ws):
        match[w] = m
      if is_stable(ins, match):
        result.append(match)
  else:
    for ms in itertools.permutations(range(ins.num_proposer), ins.num_responder):
      match = list(ms)
      if is_stable(ins, match):
        result.append(match)
  return result


def is_proposer_optimal(ins, match):
  """Check that no stable matching gives any proposer a better partner."""
  rank = lambda m, w: ins.num_responder if w is None else ins.proposer_rank[m, w]
  mine = _proposer_match(ins, match)
  for other in stable_matchings(ins):
    theirs = _proposer_match(ins, other)
    if any(rank(m, theirs[m]) < rank(m, mine[m])
           for m in range(ins.num_proposer)):
      return False
  return True


class RoundHistory():
  """Observer recording the state of every round of a run.

  Usage: `solve(ins, observer=RoundHistory())`, then `history.rounds[r - 1]`
  is the `(round_num, match, single)` snapshot of round r.
  """
  def __init__(self, verbose=False):
    self.rounds = []
    self.verbose = verbose

  def __call__(self, round_num, match, single):
    self.rounds.append((round_num, match, single))
    if self.verbose:
      print("round #{0}: match={1}, single={2}".format(
          round_num, list(match), sorted(single)))

  def __len__(self):
    return len(self.rounds)

  def num_single(self):
    """Returns the size of the single set after each round."""
    return [len(single) for _, _, single in self.rounds]
