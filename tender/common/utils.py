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

import socket
from contextlib import closing

from tender.common.constants import DockerConst


def find_free_port(host: str = DockerConst.LOCALHOST):
    
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def exit_code(returncode: int):
    
    """Negative return codes mean the process was killed by a signal. Shells report 128 + signal"""
    
    if returncode is None:
        return 1
    elif returncode < 0:
        return 128 - returncode
    else:
        return returncode
