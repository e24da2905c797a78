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

from tender.common.parser import StructCleaner, tail_lines, volume_safe


def test_cleaner_depth():
    
    dyct = {'a': None, 'b': {'c': None, 'd': 1}}
    
    assert StructCleaner()(dyct) == {'b': {'d': 1}}
    assert StructCleaner(depth=1)(dyct) == {'b': {'c': None, 'd': 1}}


def test_volume_safe():
    
    assert volume_safe('tender', 'my project', 'dev') == 'tender-my_project-dev'


def test_tail_lines():
    
    assert tail_lines(b'one\ntwo\nthree\n', 2) == 'two\nthree'
