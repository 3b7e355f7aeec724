import pytest

from listening_dataset.dataset import Dataset
from listening_dataset.models import Song


@pytest.fixture
def listening_history():
    return {"A": {"s1": 3, "s2": 1}, "B": {"s1": 2}}


@pytest.fixture
def song_catalog():
    return {"s1": Song("s1", ("A", "B")), "s2": Song("s2", ("A",))}


@pytest.fixture
def dataset(listening_history, song_catalog):
    return Dataset(listening_history, song_catalog)


@pytest.fixture
def ranked_catalog():
    # Listener counts: s5=5, s4=4, s3=3, s2=2, s1=1, s0=0
    return {
        f"s{i}": Song(f"s{i}", tuple(f"u{j}" for j in range(i)))
        for i in (3, 0, 5, 1, 4, 2)
    }


@pytest.fixture
def triplets_file(tmp_path):
    path = tmp_path / "triplets.txt"
    path.write_text(
        "\n".join(
            [
                "u1\ts1\t3",
                "u1\ts2\t1",
                "u2\ts1\t2",
                "u3\ts1\t7",
                "u3\ts3\t1",
                "u2\ts2\t4",
                "u1\ts1\t2",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return path
