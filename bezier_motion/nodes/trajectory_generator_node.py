#!/usr/bin/env python3
"""
trajectory_generator_node.py

- Builds a cubic Bezier spline through the configured waypoints
- Time-parameterizes it (trapezoidal profile) and offsets it to both wheels
- Seeds the cumulative wheel distance from the latest /wheel_positions reading
- Publishes (latched):
    - nav_msgs/Path on 'center_path', 'left_path', 'right_path' (for RViz)
    - std_msgs/Float32MultiArray on 'trajectory' as [x,y,t, x,y,t, ...]
    - std_msgs/Float32MultiArray on 'left_trajectory' / 'right_trajectory'
      as [x,y,t,v, x,y,t,v, ...]
"""

import math

import rclpy
from geometry_msgs.msg import PoseStamped
from nav_msgs.msg import Path
from rclpy.node import Node
from rclpy.qos import DurabilityPolicy, HistoryPolicy, QoSProfile, ReliabilityPolicy
from std_msgs.msg import Float32MultiArray

from bezier_motion.exceptions import TrajectoryError
from bezier_motion.utils.preview import DEFAULT_WAYPOINTS, load_waypoints
from bezier_motion.utils.time_parameterization import MotionLimits, ShortPathPolicy
from bezier_motion.utils.trajectory import Trajectory, TrajectoryConfig


def flatten(points, with_velocity=False):
    flat = []
    for p in points:
        flat += [float(p.x), float(p.y), float(p.time)]
        if with_velocity:
            flat.append(float(p.velocity))
    return flat


class TrajectoryGeneratorNode(Node):
    def __init__(self):
        super().__init__('trajectory_generator_node')

        # params
        self.declare_parameter('waypoints_file', '')         # optional CSV of waypoints x,y
        self.declare_parameter('waypoints_xy', [0.0])        # flat [x0,y0,x1,y1,...]; ignored if < 4 values
        self.declare_parameter('v_cruise', 0.3)              # m/s
        self.declare_parameter('a_max', 0.5)                 # m/s^2
        self.declare_parameter('v_start', 0.0)
        self.declare_parameter('v_end', 0.0)
        self.declare_parameter('track_width', 0.5)           # m
        self.declare_parameter('number_of_steps', 100)
        self.declare_parameter('backwards', False)
        self.declare_parameter('start_distance', 0.0)        # used when no wheel reading arrives
        self.declare_parameter('short_path_policy', ShortPathPolicy.REFERENCE.value)
        self.declare_parameter('frame_id', 'odom')
        self.declare_parameter('latched_qos', True)

        p = self.get_parameter
        self.waypoints_file = str(p('waypoints_file').value)
        self.waypoints_xy = list(p('waypoints_xy').value)
        self.v_cruise = float(p('v_cruise').value)
        self.a_max = float(p('a_max').value)
        self.v_start = float(p('v_start').value)
        self.v_end = float(p('v_end').value)
        self.track_width = float(p('track_width').value)
        self.number_of_steps = int(p('number_of_steps').value)
        self.backwards = bool(p('backwards').value)
        self.start_distance = float(p('start_distance').value)
        self.short_path_policy = str(p('short_path_policy').value)
        self.frame_id = str(p('frame_id').value)
        self.latched_qos = bool(p('latched_qos').value)

        qos = QoSProfile(
            depth=1,
            durability=DurabilityPolicy.TRANSIENT_LOCAL if self.latched_qos else DurabilityPolicy.VOLATILE,
            history=HistoryPolicy.KEEP_LAST,
            reliability=ReliabilityPolicy.RELIABLE
        )
        self.center_pub = self.create_publisher(Path, 'center_path', qos)
        self.left_pub = self.create_publisher(Path, 'left_path', qos)
        self.right_pub = self.create_publisher(Path, 'right_path', qos)
        self.traj_pub = self.create_publisher(Float32MultiArray, 'trajectory', qos)
        self.left_traj_pub = self.create_publisher(Float32MultiArray, 'left_trajectory', qos)
        self.right_traj_pub = self.create_publisher(Float32MultiArray, 'right_trajectory', qos)

        # [left, right] wheel distances from the drivetrain
        self.latest_wheels = None
        self.wheel_sub = self.create_subscription(
            Float32MultiArray, 'wheel_positions', self._wheels_cb, 10)

        self._published = False
        # one-shot timer to publish soon after startup
        self._timer = self.create_timer(0.8, self._publish_once)

        self.get_logger().info("Trajectory Generator Node (Bezier spline) started.")

    def _wheels_cb(self, msg: Float32MultiArray):
        if len(msg.data) >= 2:
            self.latest_wheels = (float(msg.data[0]), float(msg.data[1]))

    def _get_waypoints(self):
        # priority: CSV -> parameter -> default
        if self.waypoints_file:
            try:
                w = load_waypoints(self.waypoints_file)
            except (OSError, ValueError) as e:
                self.get_logger().warn(f"Failed to load waypoints from CSV '{self.waypoints_file}': {e}")
                w = None
            if w and len(w) >= 2:
                return w
            self.get_logger().warn("Waypoints file invalid; falling back.")

        if len(self.waypoints_xy) >= 4 and len(self.waypoints_xy) % 2 == 0:
            xy = self.waypoints_xy
            return [(float(xy[i]), float(xy[i + 1])) for i in range(0, len(xy), 2)]

        return DEFAULT_WAYPOINTS

    def _path_msg(self, points):
        path_msg = Path()
        path_msg.header.frame_id = self.frame_id
        path_msg.header.stamp = self.get_clock().now().to_msg()
        for pt in points:
            ps = PoseStamped()
            ps.header = path_msg.header
            ps.pose.position.x = float(pt.x)
            ps.pose.position.y = float(pt.y)
            ps.pose.orientation.z = math.sin(0.5 * pt.heading)
            ps.pose.orientation.w = math.cos(0.5 * pt.heading)
            path_msg.poses.append(ps)
        return path_msg

    def _build(self):
        start_distance = self.start_distance
        if self.latest_wheels is not None:
            start_distance = 0.5 * (self.latest_wheels[0] + self.latest_wheels[1])
        else:
            self.get_logger().warn(
                f"No /wheel_positions received yet; using start_distance={start_distance:.3f}")

        limits = MotionLimits(self.v_cruise, self.a_max, self.v_start, self.v_end)
        config = TrajectoryConfig(
            track_width=self.track_width,
            number_of_steps=self.number_of_steps,
            start_distance=start_distance,
            short_path_policy=ShortPathPolicy(self.short_path_policy),
        )
        return Trajectory.through_knots(self._get_waypoints(), limits,
                                        backwards=self.backwards, config=config)

    def _publish_once(self):
        if self._timer is not None:
            self._timer.cancel()
        if self._published:
            return

        try:
            traj = self._build()
        except (TrajectoryError, ValueError) as e:
            self.get_logger().error(f"Cannot build trajectory: {e}")
            return

        self.center_pub.publish(self._path_msg(traj.center_path))
        self.left_pub.publish(self._path_msg(traj.left_path))
        self.right_pub.publish(self._path_msg(traj.right_path))

        for pub, points, with_velocity in (
                (self.traj_pub, traj.center_path, False),
                (self.left_traj_pub, traj.left_path, True),
                (self.right_traj_pub, traj.right_path, True)):
            msg = Float32MultiArray()
            msg.data = flatten(points, with_velocity)
            pub.publish(msg)
        self._published = True

        start = traj.center_path[0]
        end = traj.center_path[-1]
        self.get_logger().info(
            f"Published trajectory: {len(traj.center_path)} points, "
            f"arc_length={traj.arc_length:.3f} m, total_time={traj.total_time:.3f}s "
            f"(trapezoidal={traj.profile.is_trapezoidal})")
        self.get_logger().info(
            f"Path start: ({start.x:.3f}, {start.y:.3f}), end: ({end.x:.3f}, {end.y:.3f})")

    def destroy_node(self):
        if self._timer is not None:
            self._timer.cancel()
        super().destroy_node()


def main(args=None):
    rclpy.init(args=args)
    node = TrajectoryGeneratorNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    node.destroy_node()
    rclpy.shutdown()


if __name__ == '__main__':
    main()
