"""
Stablematch
=============================================
Solving two-sided stable matching problems with deferred acceptance.

Example:

Suppose that we would like to match 3 proposers (m0, m1, m2) with 3
responders (w0, w1, w2). Each agent ranks every agent of the other side, from
the most preferable to the least preferable. Proposer m0 ranks
w0 > w1 > w2, proposer m1 ranks w1 > w0 > w2 and proposer m2 ranks
w0 > w1 > w2:
---------------------------------------------
  >>> proposer_pref = [[0, 1, 2],
  ...                  [1, 0, 2],
  ...                  [0, 1, 2]]
---------------------------------------------
Responder w0 ranks m1 > m0 > m2, while w1 and w2 both rank m0 > m1 > m2:
---------------------------------------------
  >>> responder_pref = [[1, 0, 2],
  ...                   [0, 1, 2],
  ...                   [0, 1, 2]]
---------------------------------------------
Every list must be a permutation of the whole opposite side. The two sides
may have different sizes, in which case some agents stay unmatched.

Construct the instance and solve it:
----------------------------------------------
  >>> import stablematch
  >>> S = stablematch.MatchingInstance(proposer_pref, responder_pref)
  >>> sol = stablematch.solve(S)
  >>> sol.match
  [0, 1, 2]
  >>> sol.rounds_used
  3
----------------------------------------------
The matching is stable and the best stable matching for every proposer. The
best one for the responders is obtained by letting them propose:
----------------------------------------------
  >>> stablematch.solve(S.transpose()).match
  [1, 0, 2]
----------------------------------------------
Intermediate states can be followed with an observer, which is called once per
round with the round number, the current match and the single proposers:
----------------------------------------------
  >>> history = stablematch.RoundHistory()
  >>> sol = stablematch.solve(S, observer=history)
  >>> history.num_single()
  [1, 1, 0]
----------------------------------------------
Please refer to the docstring of stablematch.MatchingSolution to see different
ways to access the solution.
"""

from stablematch.core import (MatchingError, ConfigurationError,
                              InvariantViolation, MatchingAborted)
from stablematch.instance import *
from stablematch.random import *
from stablematch.utils import *
