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

from tender.common.parser import StructCleaner


class PrettyError(Exception):
    
    @classmethod
    def parse_cause(cls, exc: Exception = None):
        
        if exc.__cause__ is None:
            if len(exc.args) == 1 and isinstance(exc.args[0], Exception):
                exc.__cause__ = exc.args[0]
            else:
                return None
        
        if isinstance(exc.__cause__, cls):
            return exc.__cause__.pretty()
        else:
            return '{}: {}'.format(
                exc.__cause__.__class__.__name__,
                exc.__cause__.__str__()
            )
    
    @classmethod
    def parse_exc(cls, exc: Exception = None):
        
        cause = cls.parse_cause(exc)
        
        dyct = StructCleaner()(dict(
            Error=exc.__class__.__name__,
            Message=str(exc),
            cause=cause
        ))
        
        if isinstance(cause, dict) and cause.get('Message') == dyct.get('Message'):
            _ = dyct.pop('Message', None)
        
        return dyct
    
    def pretty(self):
        
        return self.parse_exc(self)
    
    def __str__(self):
        
        return '; '.join([str(arg) for arg in self.args])


class ResolutionError(PrettyError):
    
    pass


class ConfigurationError(PrettyError):
    
    pass


class MisusageError(PrettyError):
    
    pass


class ValidationError(PrettyError):
    
    pass


class EngineError(PrettyError):
    
    """The container engine's binary could not be called or returned an error"""
    
    def __init__(self, message: str, output: str = None):
        
        super().__init__(message)
        self.output = output or ''
    
    def pretty(self):
        
        dyct = super().pretty()
        
        if self.output:
            dyct['Output'] = self.output
        
        return dyct


class UnknownService(ResolutionError):
    
    pass


class UnknownTool(ResolutionError):
    
    pass


class NoActiveServiceContext(MisusageError):
    
    pass


class ProjectNotConfigured(ConfigurationError):
    
    pass


class StoreNotConfigured(ConfigurationError):
    
    pass


class ServiceNotYetRun(PrettyError):
    
    pass


class VoyageError(PrettyError):
    
    """Aborts a whole run. Always names the service that caused it"""
    
    WHAT = 'failed'
    
    def __init__(self, service: str, diagnostic: str = None):
        
        self.service = service
        self.diagnostic = (diagnostic or '').strip()
        super().__init__("Service '{}' {}".format(service, self.WHAT))
    
    def pretty(self):
        
        dyct = super().pretty()
        dyct['Message'] = self.args[0]
        dyct['Service'] = self.service

        if self.diagnostic:
            dyct['Diagnostic'] = self.diagnostic
        
        return dyct
    
    def __str__(self):
        
        if self.diagnostic:
            return '{}: {}'.format(self.args[0], self.diagnostic)
        else:
            return self.args[0]


class PullFailure(VoyageError):
    
    WHAT = 'could not pull its image'


class StartFailure(VoyageError):
    
    WHAT = 'could not start its container'


class ReadinessFailure(VoyageError):
    
    WHAT = 'failed its readiness check'


class SetupFailure(VoyageError):
    
    WHAT = 'failed during its setup callback'
