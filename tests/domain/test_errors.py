from unittest import TestCase
import unittest

from nncore.domain._errors import (
    CheckpointError,
    ModuleIndexError,
    ParameterIndexError,
    UnknownModuleTypeError,
)


class TestErrorTaxonomy(TestCase):
    def test_parameter_index_error_carries_position_and_range(self):
        err = ParameterIndexError(5, 3)
        self.assertIsInstance(err, IndexError)
        self.assertEqual(err.position, 5)
        self.assertEqual(err.size, 3)
        self.assertIn("5", str(err))
        self.assertIn("[0, 3)", str(err))

    def test_parameter_index_error_on_empty_module(self):
        self.assertIn("[0, 0)", str(ParameterIndexError(0, 0)))

    def test_module_index_error_is_index_error(self):
        err = ModuleIndexError(-1, 2)
        self.assertIsInstance(err, IndexError)
        self.assertEqual(err.position, -1)
        self.assertIn("[0, 2)", str(err))

    def test_checkpoint_errors_are_value_errors(self):
        self.assertTrue(issubclass(CheckpointError, ValueError))
        err = UnknownModuleTypeError("Conv9d")
        self.assertIsInstance(err, ValueError)
        self.assertEqual(err.type_name, "Conv9d")
        self.assertIn("Conv9d", str(err))


if __name__ == "__main__":
    unittest.main()
