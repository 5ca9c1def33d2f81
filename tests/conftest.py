import pytest

from mkappa.models import RaterData


@pytest.fixture
def two_raters():
    # Segment agreements 1, 1/2, 1/2 -> Po 2/3, Pc 1/3, kappa 1/2
    return RaterData.from_code_lists([
        [[0], [0, 1], [1]],
        [[0], [1], [1, 2]],
    ])


@pytest.fixture
def three_raters():
    # Segment agreements 1/3, 2/3, 2/3, 1 -> Po 2/3, Pc 8/33, kappa 14/25
    return RaterData.from_code_lists(
        [
            [[0], [0, 1], [1], [2]],
            [[0], [1], [1], [2]],
            [[1], [0, 1], [1, 2], []],
        ],
        rater_names=["Ana", "Ben", "Cy"],
    )


@pytest.fixture
def write_csv(tmp_path):
    def _write(name, text):
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write
