from video_annotator.main import run

run()
