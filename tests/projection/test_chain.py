"""Tests for transform stages and their composition."""

import math

import pytest

from maplat.contracts import ContractViolation
from maplat.errors import DegenerateTransformError
from maplat.projection.chain import (
    TransformChain,
    TransformStage,
    affine_stage,
    identity_stage,
    operation_stage,
    shift_stage,
    tin_stage,
)
from maplat.projection.datum import NamedTransform

pytestmark = pytest.mark.unit


class RecordingTin:
    """Stands in for Tin and records what it is asked to transform."""

    def __init__(self):
        self.calls = []

    def transform(self, xy, inverse=False):
        self.calls.append((tuple(xy), inverse))
        return (xy[0] * 10, xy[1] * 10) if not inverse else (xy[0] / 10, xy[1] / 10)


class TestAffineStage:

    def test_forward_matches_world_file_formula(self):
        stage = affine_stage(2, 0, 10, 0, 2, 20)
        assert stage.forward([1, 1]) == (12.0, 18.0)

    def test_inverse_undoes_forward(self):
        stage = affine_stage(2, 0, 10, 0, 2, 20)
        assert stage.inverse([12, 18]) == pytest.approx((1.0, 1.0))

    def test_rotated_world_file_round_trips(self):
        stage = affine_stage(0.8, 0.3, 500.0, -0.2, 1.1, 900.0)
        for p in [(0, 0), (123.4, -56.7), (1e4, 2e4)]:
            assert stage.inverse(stage.forward(p)) == pytest.approx(p)

    def test_zero_determinant_raises(self):
        with pytest.raises(DegenerateTransformError, match="not invertible"):
            affine_stage(1, 2, 0, 2, 4, 0)

    def test_non_finite_parameters_raise(self):
        with pytest.raises(DegenerateTransformError):
            affine_stage(math.inf, 0, 0, 0, 1, 0)

    def test_integer_parameters_give_floats(self):
        x, y = affine_stage(1, 0, 0, 0, 1, 0).forward((3, 4))
        assert isinstance(x, float) and isinstance(y, float)


class TestOtherStages:

    def test_shift_forward_adds_and_inverse_subtracts(self):
        stage = shift_stage(100.0, -50.0)
        assert stage.forward((1.0, 1.0)) == (101.0, -49.0)
        assert stage.inverse((101.0, -49.0)) == (1.0, 1.0)

    def test_identity_stage(self):
        stage = identity_stage()
        assert stage.forward((3, 4)) == (3.0, 4.0)
        assert stage.inverse((3, 4)) == (3.0, 4.0)

    def test_tin_stage_negates_y_before_forward_lookup(self):
        tin = RecordingTin()
        stage = tin_stage(tin)

        assert stage.forward((5.0, -7.0)) == (50.0, 70.0)
        assert tin.calls[-1] == ((5.0, 7.0), False)

    def test_tin_stage_negates_y_after_inverse_lookup(self):
        tin = RecordingTin()
        stage = tin_stage(tin)

        assert stage.inverse((50.0, 70.0)) == (5.0, -7.0)
        assert tin.calls[-1] == ((50.0, 70.0), True)

    def test_operation_stage_composes_in_order_and_unwinds_in_reverse(self):
        double = NamedTransform("A", "B", lambda p: (p[0] * 2, p[1] * 2), lambda p: (p[0] / 2, p[1] / 2))
        plus = NamedTransform("B", "C", lambda p: (p[0] + 1, p[1] + 1), lambda p: (p[0] - 1, p[1] - 1))
        stage = operation_stage(double, plus)

        assert stage.name == "operation:A->B,B->C"
        assert stage.forward((1, 2)) == (3.0, 5.0)
        assert stage.inverse((3, 5)) == (1.0, 2.0)


class TestTransformChain:

    def test_forward_applies_stages_first_to_last(self):
        chain = TransformChain(system=affine_stage(2, 0, 10, 0, 2, 20), warp=shift_stage(1, 1))
        # affine (1,1) -> (12,18), then shift -> (13,19)
        assert chain.forward((1, 1)) == (13.0, 19.0)

    def test_inverse_applies_stage_inverses_last_to_first(self):
        chain = TransformChain(system=affine_stage(2, 0, 10, 0, 2, 20), warp=shift_stage(1, 1))
        assert chain.inverse((13, 19)) == pytest.approx((1.0, 1.0))

    def test_empty_chain_is_identity(self):
        chain = TransformChain()
        assert len(chain) == 0
        assert chain.forward((1, 2)) == (1.0, 2.0)
        assert repr(chain) == "TransformChain(identity)"

    def test_names_follow_stage_order(self):
        chain = TransformChain(
            system=affine_stage(1, 0, 0, 0, 1, 0),
            warp=shift_stage(0, 0),
            operation=identity_stage("operation"),
        )
        assert chain.names == ("world_file", "shift", "operation")
        assert len(chain) == 3

    def test_non_finite_stage_output_violates_contract(self):
        broken = TransformStage("broken", lambda p: (math.nan, 0.0), lambda p: (0.0, 0.0))
        chain = TransformChain(warp=broken)

        with pytest.raises(ContractViolation, match="broken"):
            chain.forward((1, 1))
