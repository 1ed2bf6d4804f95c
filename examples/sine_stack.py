"""Two sines in a stack, toggling one with the mute flag."""

from wavestack import ArrayBufferProvider, SineBuffer, WaveStack

provider = ArrayBufferProvider(sample_rate=8.0)
low = SineBuffer(provider, 1.0, 1.0)
high = SineBuffer(provider, 1.0, 2.0, amplitude=0.5)

stack = WaveStack(provider, 1.0)
stack.add_entry(low)
stack.add_entry(high)

if __name__ == "__main__":
    print("both:     ", stack.buffer.channel_data(0).round(3).tolist())
    stack.set_muted_state(high, True)
    print("low only: ", stack.buffer.channel_data(0).round(3).tolist())
    stack.remove_entry(low)
    print("nothing:  ", stack.buffer.channel_data(0).round(3).tolist())
    print(f"regenerations: {stack.regeneration_count}")
