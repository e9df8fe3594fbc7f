from river_trace import smooth_path


def test_zero_iterations_is_identity():
    path = [(0, 0), (10, 10), (20, 0), (30, 10)]
    assert smooth_path(path, 0) == path


def test_short_paths_untouched():
    assert smooth_path([(1, 2), (3, 4)], 5) == [(1, 2), (3, 4)]
    assert smooth_path([(1, 2)], 5) == [(1, 2)]


def test_single_pass_kernel():
    assert smooth_path([(0, 0), (10, 10), (20, 0)], 1) == [(0, 0), (10, 5), (20, 0)]


def test_positions_stay_real_valued_between_passes():
    assert smooth_path([(0, 0), (10, 10), (20, 0)], 2) == [(0, 0), (10, 3), (20, 0)]
    # 1 -> 0.5 -> 0.25; rounding after every pass would give 1 -> 1 -> 1
    assert smooth_path([(0, 0), (0, 1), (0, 0)], 2) == [(0, 0), (0, 0), (0, 0)]


def test_updates_are_simultaneous():
    # updating in place would feed the new x=4 into the next point and give 1, not 2
    assert smooth_path([(0, 0), (8, 0), (0, 0), (0, 0)], 1) == [(0, 0), (4, 0), (2, 0), (0, 0)]
    straight = [(0, 0), (0, 4), (0, 8), (0, 12)]
    assert smooth_path(straight, 1) == straight


def test_endpoints_fixed():
    path = [(3, 7), (20, 40), (35, 12), (60, 65), (90, 1)]
    for n in range(0, 6):
        out = smooth_path(path, n)
        assert out[0] == path[0]
        assert out[-1] == path[-1]
        assert len(out) == len(path)


def test_input_not_modified():
    path = [(0, 0), (10, 10), (20, 0)]
    smooth_path(path, 3)
    assert path == [(0, 0), (10, 10), (20, 0)]
