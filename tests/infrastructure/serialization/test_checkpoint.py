from unittest import TestCase
import json
import tempfile
import unittest
from pathlib import Path

import numpy as np

from nncore.domain._errors import CheckpointError, UnknownModuleTypeError
from nncore.infrastructure._module import Module
from nncore.infrastructure._parameter import Parameter
from nncore.infrastructure.containers._sequential import Sequential
from nncore.infrastructure.layers._activations import Tanh
from nncore.infrastructure.layers._linear import Linear
from nncore.infrastructure.module._checkpoint import (
    CHECKPOINT_FORMAT,
    load_module,
    save_module,
)
from nncore.infrastructure.module._serialization_core import (
    module_from_config,
    module_to_config,
    register_module,
)
from nncore.infrastructure.module._serialization_weights import (
    extract_state_payload,
    load_state_payload_,
)
from nncore.infrastructure.tensor._tensor import Tensor


@register_module()
class _ScaleForCheckpoint(Module):
    def __init__(self, size: int = 3) -> None:
        self.size = size
        super().__init__(
            [Parameter(np.ones((size,))), Parameter(np.zeros((size,)))]
        )

    def forward(self, x):
        return x * self._params[0] + self._params[1]

    def pretty_string(self) -> str:
        return f"ScaleForCheckpoint ({self.size})"

    def get_config(self):
        return {"size": self.size}

    @classmethod
    def from_config(cls, cfg):
        return cls(**cfg)


class _Unregistered(Module):
    def forward(self, x):
        return x

    def pretty_string(self) -> str:
        return "Unregistered"


def _assert_same_params(test: TestCase, a: Module, b: Module) -> None:
    pa, pb = a.parameters(), b.parameters()
    test.assertEqual(len(pa), len(pb))
    for x, y in zip(pa, pb):
        test.assertEqual(x.dtype, y.dtype)
        test.assertEqual(x.shape, y.shape)
        test.assertEqual(x.to_numpy().tobytes(), y.to_numpy().tobytes())


class TestStatePayload(TestCase):
    def test_payload_follows_persisted_state_order(self):
        m = _ScaleForCheckpoint()
        payload = extract_state_payload(m)
        self.assertEqual(list(payload.keys()), list(Module.PERSISTED_STATE))
        self.assertEqual(list(payload.keys()), ["params", "train"])
        self.assertEqual(len(payload["params"]), 2)
        self.assertTrue(payload["train"])

    def test_load_restores_values_in_place_and_mode(self):
        src = _ScaleForCheckpoint()
        src.param(0).copy_from_numpy(np.array([1.5, 2.5, 3.5]))
        src.eval()

        dst = _ScaleForCheckpoint()
        originals = dst.parameters()
        load_state_payload_(dst, extract_state_payload(src))

        self.assertEqual(dst.parameters(), originals)
        _assert_same_params(self, src, dst)
        self.assertFalse(dst.training)
        self.assertFalse(any(p.requires_grad for p in dst.parameters()))

    def test_count_mismatch_raises_without_mutation(self):
        src = Linear(3, 3, bias=False)
        dst = Linear(3, 3)
        before = [p.to_numpy() for p in dst.parameters()]

        with self.assertRaises(CheckpointError):
            load_state_payload_(dst, extract_state_payload(src))

        for p, v in zip(dst.parameters(), before):
            np.testing.assert_array_equal(p.to_numpy(), v)
        self.assertTrue(dst.training)

    def test_saved_shape_replaces_parameter(self):
        src = _ScaleForCheckpoint(size=3)
        src.param(1).copy_from_numpy(np.full((3,), 9.0))
        dst = _ScaleForCheckpoint(size=3)
        kept = dst.param(1)
        payload = extract_state_payload(src)
        payload["params"][0] = extract_state_payload(_ScaleForCheckpoint(size=4))["params"][0]

        load_state_payload_(dst, payload)

        self.assertEqual(dst.param(0).shape, (4,))
        self.assertIsInstance(dst.param(0), Parameter)
        np.testing.assert_array_equal(dst.param(0).to_numpy(), np.ones((4,)))
        self.assertIs(dst.param(1), kept)
        np.testing.assert_array_equal(dst.param(1).to_numpy(), np.full((3,), 9.0))

    def test_saved_dtype_replaces_parameter(self):
        src = _ScaleForCheckpoint(size=3)
        src.set_params(Parameter(np.array([0.1, 0.2, 0.3]), dtype=np.float64), 0)
        src.eval()
        dst = _ScaleForCheckpoint(size=3)

        load_state_payload_(dst, extract_state_payload(src))

        self.assertEqual(dst.param(0).dtype, np.float64)
        _assert_same_params(self, src, dst)
        self.assertFalse(dst.param(0).requires_grad)

    def test_malformed_payload_raises_without_mutation(self):
        src = _ScaleForCheckpoint(size=4)
        dst = _ScaleForCheckpoint(size=3)
        before = dst.parameters()
        payload = extract_state_payload(src)
        payload["params"][1] = {"b64": "", "dtype": "float32", "shape": [4], "order": "C"}

        with self.assertRaises(CheckpointError):
            load_state_payload_(dst, payload)

        self.assertEqual(dst.parameters(), before)
        self.assertEqual(dst.param(0).shape, (3,))

    def test_missing_field_raises(self):
        m = _ScaleForCheckpoint()
        with self.assertRaises(CheckpointError):
            load_state_payload_(m, {"params": []})


class TestArchitectureConfig(TestCase):
    def test_tree_shape(self):
        model = Sequential(Linear(2, 3), Tanh())
        model.module(1).eval()
        node = module_to_config(model)

        self.assertEqual(node["type"], "Sequential")
        self.assertEqual(node["config"], {})
        self.assertTrue(node["train"])
        self.assertEqual([c["type"] for c in node["children"]], ["Linear", "Tanh"])
        self.assertFalse(node["children"][1]["train"])
        self.assertEqual(node["children"][0]["children"], [])

    def test_round_trip_rebuilds_parameter_layout(self):
        model = Sequential(Linear(2, 3), Tanh(), Linear(3, 1, bias=False))
        rebuilt = module_from_config(module_to_config(model))

        self.assertIsInstance(rebuilt, Sequential)
        self.assertEqual(
            [p.shape for p in rebuilt.parameters()],
            [p.shape for p in model.parameters()],
        )

    def test_unknown_type(self):
        with self.assertRaises(UnknownModuleTypeError):
            module_from_config({"type": "NoSuchModule", "config": {}, "children": []})

    def test_unregistered_module_without_config_cannot_be_saved(self):
        with self.assertRaises(NotImplementedError):
            module_to_config(_Unregistered())


class TestJsonCheckpoint(TestCase):
    def test_save_then_load_restores_params_and_mode(self):
        model = Sequential(Linear(4, 3), Tanh(), Linear(3, 2))
        model.eval()

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "nested" / "ckpt.json"
            model.save_json(path)

            raw = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(raw["format"], CHECKPOINT_FORMAT)

            loaded = Sequential.load_json(path)

        _assert_same_params(self, model, loaded)
        self.assertFalse(loaded.training)
        for child in loaded:
            self.assertFalse(child.training)
        for p in loaded.parameters():
            self.assertFalse(p.requires_grad)

    def test_train_mode_round_trip(self):
        model = _ScaleForCheckpoint(size=5)
        model.param(0).copy_from_numpy(np.random.randn(5))

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "scale.json"
            save_module(model, path)
            loaded = load_module(path)

        self.assertIsInstance(loaded, _ScaleForCheckpoint)
        _assert_same_params(self, model, loaded)
        self.assertTrue(loaded.training)
        self.assertTrue(all(p.requires_grad for p in loaded.parameters()))

    def test_child_modes_are_restored_individually(self):
        frozen = Linear(2, 2)
        model = Sequential(frozen, Linear(2, 2))
        frozen.eval()

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "mixed.json"
            model.save_json(path)
            loaded = Sequential.load_json(path)

        self.assertTrue(loaded.training)
        self.assertFalse(loaded[0].training)
        self.assertTrue(loaded[1].training)
        self.assertEqual(
            [p.requires_grad for p in loaded.parameters()],
            [False, False, True, True],
        )

    def test_loaded_module_computes_same_output(self):
        model = Sequential(Linear(3, 4), Tanh(), Linear(4, 2))
        x = Tensor(np.random.randn(5, 3))

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "model.json"
            model.save_json(path)
            loaded = Sequential.load_json(path)

        np.testing.assert_array_equal(model(x).to_numpy(), loaded(x).to_numpy())

    def test_leaf_with_replaced_dtype_round_trips(self):
        model = Linear(2, 2)
        w = np.random.randn(2, 2)
        model.set_params(Parameter(w, dtype=np.float64), 0)

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "f64.json"
            model.save_json(path)
            loaded = Linear.load_json(path)

        self.assertEqual(loaded.param(0).dtype, np.float64)
        self.assertEqual(loaded.param(1).dtype, np.float32)
        np.testing.assert_array_equal(loaded.param(0).to_numpy(), w)
        _assert_same_params(self, model, loaded)

    def test_leaf_with_replaced_shape_round_trips(self):
        model = Linear(2, 2, bias=False)
        model.set_params(Parameter(np.arange(6.0).reshape(3, 2)), 0)
        model.eval()

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "wide.json"
            model.save_json(path)
            loaded = Linear.load_json(path)

        self.assertEqual(loaded.param(0).shape, (3, 2))
        _assert_same_params(self, model, loaded)
        self.assertFalse(loaded.training)
        self.assertFalse(loaded.param(0).requires_grad)

    def test_sequential_with_replaced_shape_round_trips(self):
        model = Sequential(Linear(2, 2, bias=False))
        model.set_params(Parameter(np.ones((3, 2))), 0)

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "seq.json"
            model.save_json(path)
            loaded = Sequential.load_json(path)

        _assert_same_params(self, model, loaded)
        self.assertEqual(loaded.param(0).shape, (3, 2))
        self.assertIs(loaded[0].param(0), loaded.param(0))

    def test_nested_sequential_with_replaced_dtype_and_shape_round_trips(self):
        inner = Sequential(Linear(2, 2, bias=False), Tanh())
        model = Sequential(Linear(2, 2), inner)
        model.set_params(Parameter(np.random.randn(2, 2), dtype=np.float64), 2)
        model.set_params(Parameter(np.full((1, 3), 0.5)), 1)
        inner.eval()

        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "nested.json"
            model.save_json(path)
            loaded = Sequential.load_json(path)

        _assert_same_params(self, model, loaded)
        self.assertEqual(loaded.param(2).dtype, np.float64)
        self.assertEqual(loaded.param(1).shape, (1, 3))
        self.assertIs(loaded[1].param(0), loaded.param(2))
        self.assertIs(loaded[1][0].param(0), loaded.param(2))
        self.assertIs(loaded[0].param(1), loaded.param(1))
        self.assertEqual(
            [p.requires_grad for p in loaded.parameters()],
            [True, True, False],
        )

    def test_load_json_type_check(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "linear.json"
            Linear(2, 2).save_json(path)
            with self.assertRaises(TypeError):
                Sequential.load_json(path)
            self.assertIsInstance(Module.load_json(path), Linear)

    def test_unsupported_format(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "bad.json"
            path.write_text(json.dumps({"format": "other.v0"}), encoding="utf-8")
            with self.assertRaises(CheckpointError):
                load_module(path)


if __name__ == "__main__":
    unittest.main()
