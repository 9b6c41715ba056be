# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import functools


X = tp.TypeVar("X")


# pylint does not understand Dict[str, X],
# so we reimplement the MutableMapping interface
class Registry(tp.MutableMapping[str, X]):
    """Named collection of objects (test objectives, option presets...),
    filled either through decorators or by explicit names.
    """

    def __init__(self) -> None:
        super().__init__()
        self.data: tp.Dict[str, X] = {}
        self._information: tp.Dict[str, tp.Dict[str, tp.Any]] = {}

    def register(self, obj: X, info: tp.Optional[tp.Dict[str, tp.Any]] = None) -> X:
        """Decorator registering a function or class under its own name"""
        self.register_name(getattr(obj, "__name__", obj.__class__.__name__), obj, info)
        return obj

    def register_name(self, name: str, obj: X, info: tp.Optional[tp.Dict[str, tp.Any]] = None) -> None:
        if name in self.data:
            raise RuntimeError(f'Encountered a name collision "{name}"')
        self.data[name] = obj
        self._information[name] = dict(info) if info is not None else {}

    def register_with_info(self, **info: tp.Any) -> tp.Callable[[X], X]:
        """Decorator for registering a function along with information about it
        (eg: the location of its maximum)
        """
        return functools.partial(self.register, info=info)

    def get_info(self, name: str) -> tp.Dict[str, tp.Any]:
        if name not in self.data:
            raise ValueError(f'"{name}" is not registered (available: {sorted(self.data)}).')
        return self._information[name]

    def __getitem__(self, key: str) -> X:
        try:
            return self.data[key]
        except KeyError as e:
            raise KeyError(f'"{key}" is not registered (available: {sorted(self.data)}).') from e

    def __setitem__(self, key: str, value: X) -> None:
        self.register_name(key, value)

    def __delitem__(self, key: str) -> None:
        del self.data[key]
        self._information.pop(key, None)

    def __iter__(self) -> tp.Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)
