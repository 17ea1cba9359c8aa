"""Random Instance Generators"""

import numpy as np

import stablematch.instance

__all__ = ["gen_preferences", "gen_random_instance"]


def gen_preferences(seed, n):
  """Draw a uniformly random strict preference list over n agents.

  The draw depends on `seed` only, so the same seed always gives the same list.

  Args:
    seed: int, seed of the random generator.
    n: int, number of agents to rank.

  Returns:
    A permutation of `range(n)` as a list.
  """
  rng = np.random.RandomState(seed)
  return np.argsort(rng.rand(n)).tolist()


def gen_random_instance(num_proposer, num_responder, seed=None):
  """Generate a uniform random instance.

  Every proposer ranks all responders and every responder ranks all proposers,
  each list drawn independently and uniformly at random. All lists are drawn
  before the instance is built.

  Args:
    num_proposer: int
      Number of proposers.
    num_responder: int
      Number of responders.
    seed: int, optional
      Seed for reproducible instances. Default: fresh entropy.

  Returns:
    A `MatchingInstance` object.
  """
  seeds = np.random.RandomState(seed).randint(
      2 ** 31 - 1, size=num_proposer + num_responder)
  proposer_pref_list = [gen_preferences(int(s), num_responder)
                        for s in seeds[:num_proposer]]
  responder_pref_list = [gen_preferences(int(s), num_proposer)
                         for s in seeds[num_proposer:]]
  return stablematch.instance.MatchingInstance(
      proposer_pref_list=proposer_pref_list,
      responder_pref_list=responder_pref_list,
      num_proposer=num_proposer,
      num_responder=num_responder
  )
