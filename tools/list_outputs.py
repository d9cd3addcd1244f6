import pyaudio

pa = pyaudio.PyAudio()

print("\n=== OUTPUT DEVICES (Speakers) ===\n")
default_index = None
try:
    default_index = int(pa.get_default_output_device_info()["index"])
except OSError:
    pass
for i in range(pa.get_device_count()):
    info = pa.get_device_info_by_index(i)
    if info.get("maxOutputChannels", 0) > 0:
        marker = "*" if i == default_index else " "
        print(
            f"[OUT]{marker}Index {i}: {info['name']} | "
            f"rate={int(info['defaultSampleRate'])} | "
            f"channels={info['maxOutputChannels']}"
        )

pa.terminate()
