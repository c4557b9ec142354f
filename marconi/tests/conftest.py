from pathlib import Path

import numpy as np
import pytest

import marconi as mc

testdir = Path(__file__).parent

@pytest.fixture()
def ntwk1() -> mc.Network:
    return mc.Network(testdir / "ntwk1.s2p")

@pytest.fixture()
def line() -> mc.Network:
    return mc.Network(testdir / "line.s2p")

@pytest.fixture()
def thru() -> mc.Network:
    return mc.Network(f=[1e9], s=[[0, 1], [1, 0]], z0=50)

@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(42)
