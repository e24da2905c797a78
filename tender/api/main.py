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

from abc import ABC

from tender.common.annotations import Interactive, Validated, Validation, validation
from tender.common.constants import Regex
from tender.common.logging import Logged


class DefaultValidation(Validation):
    
    @classmethod
    @validation
    def dns_safe(cls, x):
        
        cls.non_empty_str(x)
        
        for word in Regex.DNS_SPECIAL.split(x):
            if len(word) == 0:
                raise ValueError("Special characters can only be used between alphanumerical strings")
            elif not Regex.ALPHANUM.match(word):
                raise ValueError("Contains invalid characters")
        
        return True
    
    @classmethod
    @validation
    def non_empty_str(cls, x):
        
        assert isinstance(x, str) and len(x) > 0, ValueError("Must be a non empty string")
        return True
    
    @classmethod
    @validation
    def list_of_str(cls, x):
        
        assert isinstance(x, (list, tuple)) and all([isinstance(y, str) for y in x]),\
            TypeError("Expected a list of strings. Got: {}".format(x))
        return True


def _or_none(cls, method_name):
    
    @validation
    def wrapper(x=None):
        if x is None:
            return True
        else:
            return getattr(cls, method_name)(x)
    
    setattr(cls, method_name + '_or_none', staticmethod(wrapper))


_or_none(DefaultValidation, 'dns_safe')


class TenderAPI(Interactive, Validated, Logged, ABC):
    
    valid = DefaultValidation
    
    def __init__(self, interactive: bool = False, log=None):
        
        Interactive.__init__(self, interactive=interactive)
        Logged.__init__(self, log=log)
