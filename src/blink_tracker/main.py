"""
Main Entry Point for the Blink Tracker

Runs the blink tracking loop on a webcam or a video file, or serves the
blink counter web page.
"""

import cv2
import argparse
import copy
import yaml
import logging
import time
import sys
from typing import Any, Callable, Optional, Union

from .errors import BlinkTrackerError, FrameAcquisitionError
from .integration import BlinkSession, Stage, create_notifiers
from .modules.utils.visualization import VisualizationManager
from .real_time import WebcamInterface


def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None):
    """Setup logging configuration."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def get_default_config() -> dict:
    """Get default configuration for the system."""
    return {
        'camera': {
            'device_id': 0,
            'width': 240,
            'height': 180
        },
        'tracking': {
            'template_width': 16,
            'template_height': 12,
            'window_scale': 2,
            'match_threshold': 0.4,
            'motion_threshold': 5,
            'kernel_size': 3,
            'size_tolerance': 5,
            'vertical_tolerance': 5,
            'min_distance_ratio': 2,
            'max_distance_ratio': 5,
            'settle_frames': 5,
            'text_frames': 10
        },
        'display': {
            'show_video': True,
            'show_intro': True,
            'show_status': False,
            'window_name': 'video',
            'debug_window_name': 'diff',
            'blink_text': 'blink!',
            'wait_ms': 15,
            'save_video': False,
            'video_output_path': 'blink_output.avi'
        },
        'notification': {
            'log': True,
            'command': '/bin/bash ./blinked.sh',
            'url': None,
            'timeout': 1.0
        },
        'logging': {
            'level': 'INFO',
            'log_file': None
        },
        'server': {
            'host': '0.0.0.0',
            'port': 4567
        }
    }


def merge_config(base: dict, override: dict) -> dict:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str]) -> dict:
    """Load configuration from YAML file, on top of the defaults."""
    if not config_path:
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logging.warning(f"Config file {config_path} not found, using default configuration")
        return get_default_config()
    except yaml.YAMLError as e:
        logging.error(f"Error loading config: {e}")
        return get_default_config()

    if not isinstance(config, dict):
        logging.error(f"Config file {config_path} does not contain a mapping, using default configuration")
        return get_default_config()

    return merge_config(get_default_config(), config)


def run_real_time_tracking(config: dict, video_source: Union[int, str] = 0,
                           duration: Optional[int] = None, output_path: Optional[str] = None,
                           headless: bool = False,
                           capture_factory: Callable[[Union[int, str]], Any] = cv2.VideoCapture) -> int:
    """
    Run the blink tracking loop.

    Args:
        config: System configuration
        video_source: Webcam index or video file path
        duration: Maximum duration in seconds (None for unlimited)
        output_path: Path to save session data
        headless: Run without windows or keyboard
        capture_factory: Callable opening the capture source

    Returns:
        Process exit status: 0 on quit or end of video, 1 on capture failure
    """
    display_config = config.get('display', {})
    camera_config = config.get('camera', {})
    is_video_file = isinstance(video_source, str)

    session = BlinkSession(
        config.get('tracking', {}),
        notifiers=create_notifiers(config.get('notification', {}))
    )
    visualizer = VisualizationManager()
    webcam = WebcamInterface(
        source=video_source,
        resolution=(camera_config.get('width', 240), camera_config.get('height', 180)),
        window_name=display_config.get('window_name', 'video'),
        debug_window_name=display_config.get('debug_window_name', 'diff'),
        headless=headless or not display_config.get('show_video', True),
        capture_factory=capture_factory
    )

    blink_text = display_config.get('blink_text', 'blink!')
    wait_ms = display_config.get('wait_ms', 15)
    video_writer = None
    exit_code = 0
    start_time = time.time()

    try:
        webcam.open()

        if display_config.get('show_intro', True) and not webcam.headless:
            webcam.play_intro(visualizer.intro_messages(), visualizer)

        logging.info("Starting blink tracking...")
        logging.info("Press 'q' to quit, 'r' to restart, 's' to save session data")
        start_time = time.time()

        while True:
            frame = webcam.read()

            result = session.process_frame(frame)

            if result.settle_frames:
                webcam.skip_frames(result.settle_frames, result.motion.mask)

            display_frame, debug_frame = frame, result.motion.mask
            if result.stage == Stage.TRACKING:
                display_frame, debug_frame = visualizer.draw_tracking(
                    frame, result.motion.mask, result.window, result.eye
                )
            if result.show_text:
                visualizer.draw_text(display_frame, blink_text, use_background=True)
            if display_config.get('show_status', False):
                visualizer.draw_status(display_frame, result.stage.name, session.blink_count)

            webcam.show(display_frame, debug_frame)

            if display_config.get('save_video', False):
                if video_writer is None:
                    height, width = display_frame.shape[:2]
                    fourcc = cv2.VideoWriter_fourcc(*'XVID')
                    video_writer = cv2.VideoWriter(
                        display_config.get('video_output_path', 'blink_output.avi'),
                        fourcc, 30, (width, height)
                    )
                video_writer.write(display_frame)

            key = webcam.poll_key(wait_ms)
            if key == 'q':
                logging.info("Quit requested by user")
                break
            elif key == 'r':
                session.request_restart()
            elif key == 's':
                save_path = f"session_data_{int(time.time())}.json"
                session.export_session_data(save_path)

            if duration and (time.time() - start_time) >= duration:
                logging.info(f"Duration limit of {duration} seconds reached")
                break

            if session.frame_count % 300 == 0:
                logging.info(f"Processed {session.frame_count} frames, {session.blink_count} blinks")

    except KeyboardInterrupt:
        logging.info("Tracking interrupted by user")

    except FrameAcquisitionError as e:
        if is_video_file:
            logging.info("End of video stream")
        else:
            logging.error(str(e))
            exit_code = 1

    except BlinkTrackerError as e:
        logging.error(str(e))
        exit_code = 1

    finally:
        webcam.release()
        if video_writer is not None:
            video_writer.release()

        summary = session.get_session_summary()
        logging.info("=== Session Summary ===")
        logging.info(f"Duration: {summary['session_duration']:.1f} seconds")
        logging.info(f"Frames processed: {summary['frames_processed']}")
        logging.info(f"Average FPS: {summary['avg_fps']:.1f}")
        logging.info(f"Blinks: {summary['blink_count']}")

        if output_path:
            session.export_session_data(output_path)

    return exit_code


def main(argv=None) -> int:
    """Main function with command line interface."""
    parser = argparse.ArgumentParser(description='Motion-based eye tracking and blink detection')

    parser.add_argument('--config', '-c', type=str, default='configs/default_config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--mode', '-m', choices=['realtime', 'batch', 'server'], default='realtime',
                        help='Run mode')
    parser.add_argument('--input', '-i', type=str, default=None,
                        help='Input source (webcam index or video file path)')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Output path for session data')
    parser.add_argument('--duration', '-d', type=int, default=None,
                        help='Maximum duration in seconds')
    parser.add_argument('--headless', action='store_true',
                        help='Run without display windows')
    parser.add_argument('--host', type=str, default=None,
                        help='Blink counter server host')
    parser.add_argument('--port', type=int, default=None,
                        help='Blink counter server port')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=None, help='Logging level')

    args = parser.parse_args(argv)

    setup_logging(args.log_level or 'INFO')
    config = load_config(args.config)

    log_config = config.get('logging', {})
    setup_logging(args.log_level or log_config.get('level', 'INFO'), log_config.get('log_file'))

    if args.mode == 'server':
        from .server import run_server

        server_config = config.get('server', {})
        run_server(
            host=args.host or server_config.get('host', '0.0.0.0'),
            port=args.port or server_config.get('port', 4567)
        )
        return 0

    # Convert input to appropriate type
    source = args.input if args.input is not None else config['camera'].get('device_id', 0)
    try:
        video_source = int(source)
    except ValueError:
        video_source = source

    if args.mode == 'batch':
        if isinstance(video_source, int):
            logging.error("Batch mode requires a video file path, not webcam index")
            return 1
        return run_real_time_tracking(config, video_source, args.duration,
                                      args.output or 'batch_results.json', headless=True)

    return run_real_time_tracking(config, video_source, args.duration, args.output,
                                  headless=args.headless)


if __name__ == '__main__':
    sys.exit(main())
