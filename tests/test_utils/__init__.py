from tests.test_utils.trees import write_tree

__all__ = ["write_tree"]
