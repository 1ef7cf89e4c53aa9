import pytest

from ashta_chamma.config import Config, RollConfig, config, roll_config


def test_derived_track_constants():
    assert config.OUTER_LOOP_END == 15
    assert config.SPIRAL_START == 16
    assert config.MAX_PATH_INDEX == 24
    assert config.ENTRY_ROLLS == (4, 8)


def test_base_weights_sum_to_one():
    assert sum(roll_config.base_weights.values()) == pytest.approx(1.0)
    assert set(roll_config.base_weights) == set(roll_config.sample_order)


@pytest.mark.parametrize("num_players", [1, 5])
def test_num_players_validated(num_players):
    with pytest.raises(ValueError):
        Config(NUM_PLAYERS=num_players)


def test_roll_config_rejects_zero_floor():
    with pytest.raises(ValueError):
        RollConfig(tension_floor=0.0)


def test_simulate_tool_runs_batch(capsys):
    from tools.simulate import main

    main(["--games", "2", "--num-players", "2", "--max-turns", "20000", "--seed", "4"])
    out = capsys.readouterr().out
    assert "SIMULATION COMPLETE" in out
    assert "Finished games: 2/2" in out
