from glob import glob
import os

from setuptools import find_packages, setup

package_name = 'bezier_motion'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
        (os.path.join('share', package_name, 'launch'), glob('launch/*.launch.py')),
    ],
    install_requires=[
        'setuptools',
        'numpy',
        'scipy',
        'matplotlib',
    ],
    zip_safe=True,
    maintainer='shareef',
    maintainer_email='shareef@todo.todo',
    description='Bezier spline trajectories with trapezoidal time profiles for differential-drive robots',
    license='TODO: License declaration',
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'trajectory_generator_node = bezier_motion.nodes.trajectory_generator_node:main',
            'bezier_preview = bezier_motion.utils.preview:main',
        ],
    },
)
