def pytest_addoption(parser):
    parser.addoption(
        "--runslow", action="store_true", default=False,
        help="also run tests marked slow (large threaded workloads)",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: large workloads, deselected unless --runslow is given")


def pytest_collection_modifyitems(config, items):
    """Deselect tests marked `slow` unless `--runslow` was given.

    The slow tests push tens of thousands of points through the thread pool;
    they are useful when touching the scheduler but too heavy for every run.
    """
    if config.getoption("--runslow"):
        return

    removed = []
    kept = []
    for item in items:
        if item.get_closest_marker("slow") is not None:
            removed.append(item)
            continue
        kept.append(item)

    if removed:
        config.hook.pytest_deselected(items=removed)
        items[:] = kept
        tr = config.pluginmanager.get_plugin('terminalreporter')
        if tr:
            tr.write_sep('-', f'Deselected {len(removed)} slow tests (use --runslow)')
