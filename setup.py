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

"""
Tender runs a command among the containerized services it depends on,
then tears the services down once the command exits
"""

from setuptools import find_packages, setup


def read_reqs(name):
    
    with open('./requirements/{}.txt'.format(name)) as f:
        return [line.strip() for line in f if line.strip()]


setup(
    name='tender',
    version='0.3.0',
    author='Noronha Development Team',
    description='Helper containers for the duration of a command',
    long_description=__doc__,
    zip_safe=False,
    platforms=['Unix'],
    license='Apache-2.0',
    python_requires='>=3.8',
    install_requires=read_reqs('reqs'),
    extras_require={
        'test': read_reqs('test_reqs')
    },
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    package_data={
        'tender.resources': [
            'tender.yaml'
        ]
    },
    entry_points={
        'console_scripts': [
            'tender=tender.cli.main:main'
        ]
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: Unix',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Testing',
        'Topic :: System :: Software Distribution'
    ]
)
