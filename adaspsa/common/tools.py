# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import inspect
import typing as tp


def init_defaults(cls: tp.Type[tp.Any]) -> tp.Dict[str, tp.Any]:
    """Default values of the keyword arguments of the class constructor"""
    return {
        name: param.default
        for name, param in inspect.signature(cls.__init__).parameters.items()
        if name not in ("self", "__class__") and param.default is not inspect.Parameter.empty
    }


def different_from_defaults(
    *,
    instance: tp.Any,
    instance_dict: tp.Optional[tp.Dict[str, tp.Any]] = None,
    check_mismatches: bool = False,
) -> tp.Dict[str, tp.Any]:
    """Checks which attributes are different from defaults arguments

    Parameters
    ----------
    instance: object
        the object to inspect
    instance_dict: dict
        the dict corresponding to the instance, if not provided it's self.__dict__
    check_mismatches: bool
        checks that the attributes match the parameters

    Note
    ----
    This is convenient for short repr of data structures
    """
    defaults = init_defaults(instance.__class__)
    if instance_dict is None:
        instance_dict = instance.__dict__
    if check_mismatches:
        diff = set(defaults).symmetric_difference(instance_dict)
        if diff:  # this is to help during development
            raise RuntimeError(f"Mismatch between attributes and arguments of {instance.__class__.__name__}: {diff}")
    return {
        x: instance_dict[x]
        for x, y in defaults.items()
        if x in instance_dict and y != instance_dict[x] and not x.startswith("_")
    }
