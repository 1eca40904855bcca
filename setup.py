from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")
test_requirements = parse_requirements("requirements-test.txt")

setup(
    name='unistudious_backend',
    version='0.0.1',
    install_requires=requirements,
    extras_require={"test": test_requirements},
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    entry_points={
        "console_scripts": [
            "unistudious=unistudious_backend.cli.cli:cli",
        ],
    }
)
