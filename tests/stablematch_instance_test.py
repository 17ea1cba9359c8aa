"""Unit tests for stablematch package"""

import os
import sys
sys.path.insert(0, os.path.abspath('..'))

import numpy as np
import unittest

import stablematch
from stablematch import utils


class TestMatchingInstance(unittest.TestCase):
  """Instance construction and configuration errors."""
  def setUp(self):
    self.pref_list = {
        "proposer": [
            [0, 1, 2],  # m0: w0 > w1 > w2
            [1, 0, 2],  # m1: w1 > w0 > w2
            [0, 1, 2]
        ],
        "responder": [
            [1, 0, 2],  # w0: m1 > m0 > m2
            [0, 1, 2],
            [0, 1, 2]
        ]
    }
    self.S = stablematch.MatchingInstance(
        proposer_pref_list=self.pref_list["proposer"],
        responder_pref_list=self.pref_list["responder"]
    )

  def test_sizes(self):
    self.assertEqual(self.S.num_proposer, 3)
    self.assertEqual(self.S.num_responder, 3)
    self.assertEqual(self.S.P.shape, (3, 3))

  def test_rank_matrices(self):
    self.assertListEqual(self.S.responder_rank[0].tolist(), [1, 0, 2])
    self.assertListEqual(self.S.proposer_rank[1].tolist(), [1, 0, 2])
    for m in range(3):
      self.assertListEqual(
          [self.S.responder_rank_by_proposer(m, w)
           for w in self.S.proposer_pref_list[m]], [1, 2, 3])
    for w in range(3):
      self.assertListEqual(
          [self.S.proposer_rank_by_responder(w, m)
           for m in self.S.responder_pref_list[w]], [1, 2, 3])

  def test_lists_are_copied(self):
    self.pref_list["proposer"][0][0] = 2
    self.assertListEqual(self.S.proposer_pref_list[0], [0, 1, 2])
    with self.assertRaises(ValueError):
      self.S.P[0, 0] = 2

  def test_transpose(self):
    T = self.S.transpose()
    self.assertEqual(T.num_proposer, 3)
    self.assertListEqual(T.proposer_pref_list, self.pref_list["responder"])
    self.assertListEqual(T.responder_pref_list, self.pref_list["proposer"])

  def test_wrong_length(self):
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([[0, 1], [1, 0]], [[0, 1], [1]])

  def test_duplicate_entry(self):
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([[0, 0], [1, 0]], [[0, 1], [1, 0]])

  def test_out_of_range(self):
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([[0, 2], [1, 0]], [[0, 1], [1, 0]])
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([[0, -1], [1, 0]], [[0, 1], [1, 0]])

  def test_non_integer(self):
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([[0, 1.0], [1, 0]], [[0, 1], [1, 0]])
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([[True, False], [1, 0]], [[0, 1], [1, 0]])

  def test_non_positive_size(self):
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.MatchingInstance([], [])
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.run(0, 1, [], [[]])

  def test_size_mismatch(self):
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.run(3, 2, [[0, 1], [1, 0]], [[0, 1], [1, 0]])

  def test_configuration_error_is_value_error(self):
    self.assertTrue(issubclass(stablematch.ConfigurationError, ValueError))

  def test_error_before_first_round(self):
    calls = []
    with self.assertRaises(stablematch.ConfigurationError):
      stablematch.run(2, 2, [[0, 1], [0, 0]], [[0, 1], [1, 0]],
                      observer=lambda *args: calls.append(args))
    self.assertListEqual(calls, [])


class TestMatchingSolution(unittest.TestCase):
  def setUp(self):
    self.S = stablematch.MatchingInstance(
        [[0, 1, 2], [1, 0, 2], [0, 1, 2]],
        [[1, 0, 2], [0, 1, 2], [0, 1, 2]])
    self.sol = stablematch.solve(self.S)

  def test_accessors(self):
    self.assertEqual(self.sol["w0"], 0)
    self.assertEqual(self.sol.w(1), 1)
    self.assertEqual(self.sol["m2"], 2)
    self.assertEqual(self.sol.m(1), 1)
    self.assertTrue(self.sol[(2, 2)])
    self.assertFalse(self.sol[(1, 0)])
    self.assertListEqual(self.sol.pairs(), [(0, 0), (1, 1), (2, 2)])
    with self.assertRaises(TypeError):
      self.sol["x1"]

  def test_repr(self):
    self.assertIn("3 proposers", repr(self.S))
    self.assertIn("3 rounds", repr(self.sol))

  def test_unmatched_markers(self):
    sol = stablematch.run(2, 3, [[0, 1, 2], [0, 1, 2]],
                          [[0, 1], [0, 1], [1, 0]])
    self.assertListEqual(sol.match, [0, 1, None])
    self.assertEqual(sol.unmatched_responders, frozenset([2]))
    self.assertEqual(sol.final_singles, frozenset())
    self.assertIsNone(sol["w2"])


class TestRandomGen(unittest.TestCase):
  def test_gen_preferences_is_permutation(self):
    for n in (1, 2, 7, 30):
      self.assertListEqual(sorted(stablematch.gen_preferences(3, n)),
                           list(range(n)))

  def test_gen_preferences_is_pure(self):
    self.assertListEqual(stablematch.gen_preferences(42, 20),
                         stablematch.gen_preferences(42, 20))

  def test_same_seed_same_instance(self):
    S0 = stablematch.gen_random_instance(6, 4, seed=7)
    S1 = stablematch.gen_random_instance(6, 4, seed=7)
    self.assertEqual(S0.num_proposer, 6)
    self.assertEqual(S0.num_responder, 4)
    self.assertListEqual(S0.proposer_pref_list, S1.proposer_pref_list)
    self.assertListEqual(S0.responder_pref_list, S1.responder_pref_list)

  def test_lists_are_complete(self):
    S = stablematch.gen_random_instance(5, 8, seed=1)
    for li in S.proposer_pref_list:
      self.assertListEqual(sorted(li), list(range(8)))
    for li in S.responder_pref_list:
      self.assertListEqual(sorted(li), list(range(5)))


class TestUtils(unittest.TestCase):
  def setUp(self):
    self.S = stablematch.MatchingInstance(
        [[0, 1, 2], [1, 0, 2], [0, 1, 2]],
        [[1, 0, 2], [0, 1, 2], [0, 1, 2]])

  def test_blocking_pairs(self):
    # m0 is stuck with his last choice, w0 and w1 both like him better
    self.assertListEqual(utils.blocking_pairs(self.S, [2, 1, 0]),
                         [(0, 0), (0, 1)])
    self.assertTrue(utils.is_stable(self.S, [0, 1, 2]))

  def test_unmatched_agents_block(self):
    self.assertIn((2, 2), utils.blocking_pairs(self.S, [0, 1, None]))

  def test_stable_matchings(self):
    matchings = utils.stable_matchings(self.S)
    self.assertEqual(len(matchings), 2)
    self.assertIn([0, 1, 2], matchings)
    self.assertIn([1, 0, 2], matchings)

  def test_is_proposer_optimal(self):
    self.assertTrue(utils.is_proposer_optimal(self.S, [0, 1, 2]))
    self.assertFalse(utils.is_proposer_optimal(self.S, [1, 0, 2]))

  def test_round_history(self):
    history = stablematch.RoundHistory()
    stablematch.solve(self.S, observer=history)
    self.assertEqual(len(history), 3)
    self.assertListEqual([r for r, _, _ in history.rounds], [1, 2, 3])
    self.assertListEqual(history.num_single(), [1, 1, 0])


if __name__ == '__main__':
  unittest.main()
