import os

from setuptools import find_packages, setup


here = os.path.abspath(os.path.dirname(__file__))

about = {}
with open(os.path.join(here, "pactverify", "__version__.py")) as f:
    exec(f.read(), about)


def read(filename):
    with open(os.path.join(here, filename), 'rb') as f:
        return f.read().decode('utf-8')


setup(
    name='pactverify',
    version=about['__version__'],
    description=('Verify that a provider honours the consumer driven contracts'
                 ' recorded by its consumers using the Pact framework.'),
    long_description=read('README.md'),
    long_description_content_type='text/markdown',
    entry_points='''
        [console_scripts]
        pactverify=pactverify.verifier.command_line:main
    ''',
    install_requires=[
        'requests',
        'semver',
        'colorama',
        'restnavigator'
    ],
    extras_require={
        'test': ['pytest'],
    },
    packages=find_packages(),
    classifiers=[
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Testing',
        'Topic :: Software Development :: Testing :: Acceptance',
    ]
)
