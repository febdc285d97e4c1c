import setuptools

requirements = [
    "discord.py>=2.4",
    "typer",
    "PyYAML",
]

test_requirements = [
    "pytest",
    "pytest-asyncio",
]

packages = setuptools.find_namespace_packages(where=".", include=["ErrorPy", "ErrorPy.*"])
if not packages:
    raise ValueError("No packages detected.")

setuptools.setup(
    name="ErrorPy",
    version="0.1.0",
    packages=packages,
    py_modules=["cli"],
    install_requires=requirements,
    extras_require={"test": test_requirements},
    entry_points={"console_scripts": ["errorpy=cli:bot"]},
    python_requires=">=3.11",
    license="GNU General Public License v3.0",
    author="",
    author_email="",
    description="Friendly error reporting for discord.py bots",
    zip_safe=False,
)
