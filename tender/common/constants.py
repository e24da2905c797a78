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

"""Module for keeping widely used constants"""

import os
import re


class FrameworkConst(object):
    
    FW_NAME = 'tender'
    FW_VERSION = '0.3.0'


class Encoding(object):
    
    """Common file encodings"""
    
    UTF_8 = 'UTF-8'
    DEFAULT = UTF_8


class Flag(object):
    
    """Flags for changing a method's behaviour"""
    
    VALIDATION = 'this_method_is_an_argument_validation'
    READY = 'the_lazy_class_must_be_ready_before_using_this_method'


class EnvVar(object):
    
    """Names of environment variables"""
    
    HOME = 'TENDER_HOME'


class DateFmt(object):
    
    """Common datetime formats"""
    
    READABLE = '%Y-%m-%d %H:%M:%S'
    DEFAULT = READABLE


class Extension(object):
    
    """Common file extensions"""
    
    JSON = 'json'
    PY = 'py'
    LOG = 'log'


class Regex(object):
    
    """Regular expressions"""
    
    ALPHANUM = re.compile(r'^[a-zA-Z0-9]*$')
    DNS_SPECIAL = re.compile(r'[\-\.]')
    VOLUME_UNSAFE = re.compile(r'[^a-zA-Z0-9_.\-]+')
    YAML_BREAK = re.compile(r'\n[^- ]')


class Config(object):
    
    """Name conventions in configuration files and paths"""
    
    FMT = 'yaml'
    EXT = FMT
    FILE = 'tender.{}'.format(EXT)
    LOCAL = os.path.join(os.getcwd(), FILE)
    
    class Namespace(object):
        
        """Namespaces that may be found inside configuration files"""
        
        ENGINE = 'engine'
        LOGGER = 'logger'
        STORE = 'store'
        DECLARATION = 'declaration'


class Package(object):
    
    """Paths inside the python package"""
    
    BASE = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    RESOURCES = os.path.join(BASE, 'resources')
    CONF = os.path.join(RESOURCES, Config.FILE)


class HostUser(object):
    
    """Paths inside the user home on host machines"""
    
    HOME = os.path.expanduser('~')
    TENDER = os.environ.get(EnvVar.HOME) or os.path.join(HOME, '.tender')
    LOG_DIR = os.path.join(TENDER, 'logs')
    STORE_DIR = os.path.join(TENDER, 'stores')
    CONF = os.path.join(TENDER, Config.FILE)


class LoggerConst(object):
    
    """Constants used when logging"""
    
    DEFAULT_NAME = 'tender'
    FILE_EXT = Extension.LOG
    DEFAULT_DIR = HostUser.LOG_DIR
    CONTAINER_SUBDIR = 'containers'
    PRETTY_FMT = 'yaml'
    TAIL_LINES = 20  # lines of container output quoted in a failure report


class DeclarationConst(object):
    
    """Conventions for the file where services are declared"""
    
    DEFAULT_FILE = 'tenderfile.{}'.format(Extension.PY)
    ENTRYPOINT = 'declare'


class StoreConst(object):
    
    """Conventions for persisted service settings"""
    
    DEFAULT_DIR = HostUser.STORE_DIR
    RECORD_EXT = Extension.JSON
    PREFIX = 'tender'
    DIGEST_LEN = 10  # hex chars of the (project, store, instance) digest in volume names


class DockerConst(object):
    
    """Container engine nomenclature standards"""
    
    LATEST = 'latest'
    DEFAULT_BINARY = 'docker'
    LOCALHOST = '127.0.0.1'
    CONTAINER_PREFIX = 'tender'
    
    class PullPolicy(object):
        
        ALWAYS = 'always'
        MISSING = 'missing'
        ALL = [ALWAYS, MISSING]


class IslandConst(object):
    
    """Built-in service variants"""
    
    POSTGRES = 'postgres'
    REDIS = 'redis'
    ALL = [POSTGRES, REDIS]


class Task(object):
    
    """Standards for describing the lifecycle of a supervised container"""
    
    class State(object):
        
        PENDING = 'pending'
        STARTING = 'starting'
        AWAITING_READINESS = 'awaiting_readiness'
        READY = 'ready'
        SETTING_UP = 'setting_up'
        RUNNING = 'running'
        STOPPED = 'stopped'
        START_FAILED = 'start_failed'
        READINESS_FAILED = 'readiness_failed'
        SETUP_FAILED = 'setup_failed'
        
        TRANSITIONS = {
            PENDING: [STARTING],
            STARTING: [AWAITING_READINESS, START_FAILED, STOPPED],
            AWAITING_READINESS: [READY, READINESS_FAILED, START_FAILED, STOPPED],
            READY: [SETTING_UP, STOPPED],
            SETTING_UP: [RUNNING, SETUP_FAILED, STOPPED],
            RUNNING: [STOPPED],
            START_FAILED: [STOPPED],
            READINESS_FAILED: [STOPPED],
            SETUP_FAILED: [STOPPED],
            STOPPED: []
        }
