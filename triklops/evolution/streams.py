from typing import Optional

import numpy as np


# Purposes keep seeding and breeding draws in separate streams
SEEDING = 0
BREEDING = 1


class RandomStreams:
    """
    Index-keyed random streams derived from a single run seed.

    Each (purpose, slot, generation, index) gets its own generator, built
    from a SeedSequence spawn key. An individual's random draws therefore
    depend only on its position in the run, never on which thread touches
    it or in what order.
    """

    def __init__(self, seed: Optional[int] = None):
        # With no seed, SeedSequence draws OS entropy once, here
        self.entropy = np.random.SeedSequence(seed).entropy

    def generator(self, purpose: int, slot: int, generation: int, index: int) -> np.random.Generator:
        seq = np.random.SeedSequence(self.entropy, spawn_key=(purpose, slot, generation, index))
        return np.random.Generator(np.random.PCG64(seq))
