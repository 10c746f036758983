"""Smoke test for the headless experiment runner.

Run:
    pytest tests/test_headless.py -v
"""

from experiments.run_headless import get_shared_config, run


def test_short_headless_run(capsys):
    config = get_shared_config()
    config.update({'num_agents': 2, 'seconds': 0.3, 'report_every': 0.15})

    for mode in ('learning', 'reactive'):
        results = run(config, mode, verbose=True)
        assert results['mode'] == mode
        assert results['ticks'] >= 10
        assert 0.0 < results['mean_best_brightness'] <= 1.0

    out = capsys.readouterr().out
    assert "MODE: LEARNING" in out
    assert "Reward avg" in out
