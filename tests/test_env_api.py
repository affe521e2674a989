"""
Tests for Gymnasium environment API.
"""

import pytest
import numpy as np

from isotopic.isotope_core.config_loader import load_config
from isotopic.isotope_core.env_gym import ACTION_HARD_DROP, ACTION_NAMES, IsotopicEnv


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env():
    env = IsotopicEnv()
    yield env
    env.close()


class TestIsotopicEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        """Reset should return (observation, info) tuple."""
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2

        obs, info = result
        assert isinstance(obs, dict)
        assert isinstance(info, dict)
        assert info["delta_score"] == 0

    def test_observation_structure(self, env, config):
        """Observation should have expected keys and shapes."""
        obs, _ = env.reset(seed=42)

        board_shape = (config.board.height, config.board.width)
        assert obs["board"].shape == board_shape
        assert obs["half_lives"].shape == board_shape
        assert obs["piece_mask"].sum() == 4
        assert obs["ghost_mask"].sum() == 4
        assert obs["next_kinds"].shape == (config.queue.preview_count,)
        assert int(obs["piece_element"]) == 1
        assert int(obs["hold_kind"]) == -1

    def test_observation_in_space(self, env):
        obs, _ = env.reset(seed=42)
        assert env.observation_space.contains(obs)

    def test_action_space(self, env):
        assert env.action_space.n == len(ACTION_NAMES) == 8

    def test_step_returns_five_tuple(self, env):
        """Step should return (obs, reward, terminated, truncated, info)."""
        env.reset(seed=42)

        for action in range(env.action_space.n):
            obs, reward, terminated, truncated, info = env.step(action)
            assert isinstance(obs, dict)
            assert reward == 0.0
            assert truncated is False
            assert info["action"] == ACTION_NAMES[action]
            if terminated:
                break

    def test_hard_drop_reports_delta(self, env):
        env.reset(seed=42)
        _, _, _, _, info = env.step(ACTION_HARD_DROP)
        assert info["delta_score"] > 0
        assert info["action_applied"]

    def test_numpy_action(self, env):
        env.reset(seed=42)
        env.step(np.array(1))

    def test_invalid_action(self, env):
        env.reset(seed=42)
        with pytest.raises(ValueError):
            env.step(8)

    def test_seeded_resets_match(self, env):
        obs1, _ = env.reset(seed=3)
        obs2, _ = env.reset(seed=3)
        for key in obs1:
            assert np.array_equal(obs1[key], obs2[key])

    def test_random_play_terminates_cleanly(self, env):
        env.reset(seed=0)
        env.action_space.seed(0)
        for _ in range(300):
            _, _, terminated, _, info = env.step(env.action_space.sample())
            if terminated:
                assert info["game_over"]
                break

    def test_ansi_render(self, config):
        env = IsotopicEnv(render_mode="ansi")
        env.reset(seed=1)
        text = env.render()
        env.close()
        assert len(text.splitlines()) == config.board.height + 1
