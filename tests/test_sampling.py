# -----------------------------------------------------------------------------
# Copyright 2025 Down Syndrome Education International and contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# -----------------------------------------------------------------------------
"""Tests for the sampler wrappers and logging setup."""

import logging

import arviz as az
import numpy as np
import pytest

from bayesmodels.errors import ConfigurationError
from bayesmodels.gp import fit
from bayesmodels.gp.simulate import simulate_observations
from bayesmodels.irt import pcm
from bayesmodels.irt.simulate import simulate_responses
from bayesmodels.logging_utils import setup_logging
from bayesmodels.sampling import SamplerConfig, count_divergences, sample_posterior


class TestSamplerConfig:
    """Tests for `SamplerConfig` validation."""

    def test_defaults(self):
        cfg = SamplerConfig()
        assert (cfg.draws, cfg.tune, cfg.chains) == (1000, 1000, 4)

    @pytest.mark.parametrize(
        "kwargs", [{"draws": 0}, {"chains": 0}, {"tune": -1}, {"target_accept": 1.0}]
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            SamplerConfig(**kwargs)


class TestCountDivergences:
    """Tests for `count_divergences`."""

    def test_counts_flags(self):
        idata = az.from_dict(sample_stats={"diverging": np.array([[True, False, True]])})
        assert count_divergences(idata) == 2

    def test_without_sample_stats(self):
        idata = az.from_dict(posterior={"mu": np.zeros((1, 3))})
        assert count_divergences(idata) == 0


@pytest.mark.slow
class TestSamplePosterior:
    """Short NUTS runs on simulated data."""

    def test_gp_fit(self):
        sim = simulate_observations(
            np.linspace(0.0, 4.0, 8), 1.0, 1.0, 0.2, rng=np.random.default_rng(1)
        )
        model = fit.build_model(fit.ModelSpecification(sim.x, sim.y))
        idata = sample_posterior(
            model, SamplerConfig(draws=50, tune=100, chains=1, cores=1, random_seed=1)
        )

        assert idata.posterior["f"].shape == (1, 50, 8)
        assert np.isfinite(idata.posterior["rho"]).all()
        assert (idata.posterior["rho"] > 0).all()

    def test_pcm(self):
        sim = simulate_responses([1, 2, 2], n_persons=20, rng=np.random.default_rng(2))
        model = pcm.build_model(sim.spec)
        idata = sample_posterior(
            model, SamplerConfig(draws=50, tune=100, chains=1, cores=1, random_seed=2)
        )

        beta = idata.posterior["beta"].values
        assert beta.shape == (1, 50, 3, 2)
        np.testing.assert_allclose(beta.sum(axis=-1), 0.0, atol=1e-10)
        assert idata.posterior["lambda"].shape == (1, 50, 1)


class TestSetupLogging:
    """Tests for `setup_logging`."""

    @pytest.fixture(autouse=True)
    def reset_handlers(self):
        yield
        logger = logging.getLogger("bayesmodels")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)

    def test_console_and_file(self, tmp_path):
        logger = setup_logging(run_dir=tmp_path, log_filename="run.log", level=logging.DEBUG)
        logging.getLogger("bayesmodels.sampling").debug("hello from sampling")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "hello from sampling" in (tmp_path / "run.log").read_text()

    def test_repeated_calls_do_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1
