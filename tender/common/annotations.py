# -*- coding: utf-8 -*-

# Copyright Noronha Development Team
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from abc import ABC, abstractmethod
from click import confirm
from pyvalid import accepts
from pyvalid.validators import is_validator
from typing import Type

from tender.common.constants import Flag
from tender.common.errors import MisusageError, ValidationError


def validation(func):
    
    setattr(func, Flag.VALIDATION, True)
    return func


def ready(func):
    
    setattr(func, Flag.READY, True)
    return func


def validate(**kwargs):
    
    return accepts(object, **dict([
        (key, val if not getattr(val, Flag.VALIDATION, False) else wrap_validation(key, val))
        for key, val in kwargs.items()
    ]))


def wrap_validation(arg_name, func):
    
    @is_validator
    def wrapper(*args, **kwargs):
        
        try:
            return func(*args, **kwargs)
        except Exception as e:
            message = "Argument '{}' reproved on validation '{}'".format(arg_name, func.__name__)
            raise ValidationError(message) from e
    
    return wrapper


class Configured(object):
    
    """A class that contains a static cofiguration in the form of a dictionary
    
    You may extend this class by overriding conf with a constant configuration dictionary.
    Otherwise, you may set conf after instantiating the class. Just don't forget that it's
    a static attribute, since a Configured class is supposed to have a static configuration.
    """
    
    conf: dict = None


class Lazy(ABC):
    
    ready = False
    
    _LAZY_PROPERTIES = []
    
    @abstractmethod
    def setup(self):
        
        pass
    
    def __getattribute__(self, attr_name):
        
        if attr_name in super().__getattribute__('_LAZY_PROPERTIES') and not self.ready:
            self.setup()
            self.ready = True
        
        attr = super().__getattribute__(attr_name)
        
        if getattr(attr, Flag.READY, False) and not self.ready:
            self.setup()
            self.ready = True
        
        return attr


class Interactive(object):
    
    def __init__(self, interactive: bool = False):
        
        self.interactive_mode = interactive
    
    def _decide(self, message, default: bool):
        
        if self.interactive_mode:
            return confirm(text=message, default=default)
        else:
            return default


class Validation(object):
    
    def __init__(self):
        
        raise MisusageError("Validation use should be static. Do not instantiate it")


class Validated(object):
    
    valid: Type[Validation] = None
