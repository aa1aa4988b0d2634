#!/usr/bin/env python3
"""
Launches trajectory_generator_node with its parameters.

  ros2 launch bezier_motion trajectory.launch.py
"""
from launch import LaunchDescription
from launch.actions import LogInfo
from launch_ros.actions import Node


def generate_launch_description():
    traj_gen = Node(
        package='bezier_motion',
        executable='trajectory_generator_node',
        name='trajectory_generator_node',
        output='screen',
        parameters=[{
            'v_cruise': 0.3,
            'a_max': 0.5,
            'track_width': 0.5,
            'number_of_steps': 100,
            'frame_id': 'odom',
        }],
    )

    ld = LaunchDescription()
    ld.add_action(LogInfo(msg='[trajectory.launch] starting trajectory_generator_node'))
    ld.add_action(traj_gen)
    return ld
