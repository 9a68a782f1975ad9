import numpy as np
import pytest

SAMPLE_CSV = """EuroMillions results for the last 20 days
No., Day,DD,MMM,YYYY, N1,N2,N3,N4,N5,L1,L2,  Jackpot, Wins
1234, Tue,14,Oct,2025,  3,15,22,38,47, 2, 9, 17000000, 0
1233, Fri,10,Oct,2025,  7,11,19,30,44, 1, 5, 15000000, 0
1232, Tue,07,Oct,2025,  x, 1, 2, 3, 4, 5, 6, 12000000, 0
* * * * * * *
All lotteries are drawn by machine Z
"""


def make_draws(n=100, seed=7):
    rng = np.random.default_rng(seed)
    draws = []
    for _ in range(n):
        main = sorted(int(x) for x in rng.choice(np.arange(1, 51), 5, replace=False))
        lucky = sorted(int(x) for x in rng.choice(np.arange(1, 12), 2, replace=False))
        draws.append(tuple(f"{n:02d}" for n in main + lucky))
    return draws


@pytest.fixture
def synthetic_draws():
    return make_draws()


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV
