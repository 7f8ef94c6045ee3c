import setuptools
from pathlib import Path

ROOT = Path(__file__).parent


def read_requirements(filename: str = "requirements.txt") -> list[str]:
    req_path = ROOT / filename
    if not req_path.exists():
        return []
    reqs: list[str] = []
    for line in req_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        reqs.append(line)
    return reqs


long_description = (ROOT / "README_PYPI.md").read_text(encoding="utf-8")

setuptools.setup(
    name="revgrad",
    version="0.1.0a0",  # PEP 440 compliant
    description=(
        "revgrad is a reverse-mode automatic differentiation engine on NumPy "
        "with higher-order gradients, a differentiable operation library, and "
        "a small layer/model/optimizer stack."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "revgrad-diff=revgrad.cli._differentiate:main",
            "revgrad-lstm=revgrad.cli._lstm_demo:main",
        ],
    },
    zip_safe=False,
)
